"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest

from src.legacy_renderer import LegacyConverter, Theme

# markdown-it-py logs rule chain details at DEBUG; keep test output readable.
logging.getLogger("markdown_it").setLevel(logging.WARNING)


@pytest.fixture
def converter():
    """LegacyConverter with the default github theme."""
    return LegacyConverter(theme=Theme())


@pytest.fixture
def theme():
    return Theme()
