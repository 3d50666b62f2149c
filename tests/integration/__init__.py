"""Integration tests for md-render.

These tests run both render strategies end to end against the reference
host engine and a real filesystem vault, without mocks.
"""
