"""Pytest fixtures for integration tests."""

from pathlib import Path

import pytest

from src.legacy_renderer import LegacyConverter, ResolutionCache, Theme, VaultPathResolver
from src.native_renderer import NativeRenderer, ReferenceHostRenderer

# Smallest valid PNG, content is irrelevant to rendering
PNG_BYTES = bytes.fromhex(
    '89504e470d0a1a0a0000000d4948445200000001000000010806000000'
    '1f15c4890000000d49444154789c6300010000050001a5f645400000000049454e44ae426082'
)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Create a vault with one note and an image next to it."""
    notes = tmp_path / "notes"
    notes.mkdir()
    (notes / "a.md").write_text("![cat](cat.png)\n", encoding='utf-8')
    (notes / "cat.png").write_bytes(PNG_BYTES)
    return tmp_path


@pytest.fixture
def vault_converter(vault: Path) -> LegacyConverter:
    return LegacyConverter(theme=Theme(), resolver=VaultPathResolver(str(vault), ResolutionCache()))


@pytest.fixture
def native_renderer(converter) -> NativeRenderer:
    return NativeRenderer(converter, ReferenceHostRenderer())
