"""Data models for CLI operations."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Exit codes for md-render.

    - SUCCESS (0): Document rendered
    - GENERAL_ERROR (1): Unreadable input, unwritable output, unexpected failure
    - CONFIG_ERROR (2): Invalid or unreadable configuration
    - PARITY_MISMATCH (3): Native and legacy output differ and fallback is off
    - RENDERER_UNAVAILABLE (4): Selected renderer is not available

    Example:
        >>> raise typer.Exit(ExitCode.PARITY_MISMATCH)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2
    PARITY_MISMATCH = 3
    RENDERER_UNAVAILABLE = 4


@dataclass
class RenderSettings:
    """Settings loaded from .md-render.yaml.

    Attributes:
        theme: Layout name (github, wechat, serif)
        theme_color: Color preset name, or "custom"
        custom_color: Hex color used with theme_color "custom"
        font_family: Font stack key (sans-serif, serif, monospace)
        font_size: Font size step from 1 to 5
        mac_code_block: Window header on code blocks
        code_line_number: Line-number column on code blocks
        side_padding: Horizontal padding of the outer section in px
        colored_header: Headings in the deep theme color
        avatar_url: Watermark avatar; enables the watermark figure layout
        show_image_caption: Captions below figures
        vault_root: Directory for resolving relative image sources
        use_native_strategy: Render through the host engine
        fallback_on_mismatch: Return legacy output on native failure or mismatch
        enforce_parity: Compare native output against legacy output
        parity_error_code: Error code for parity mismatches (None for the default)
    """
    theme: str = 'github'
    theme_color: str = 'blue'
    custom_color: Optional[str] = None
    font_family: str = 'sans-serif'
    font_size: int = 3
    mac_code_block: bool = True
    code_line_number: bool = False
    side_padding: int = 16
    colored_header: bool = False
    avatar_url: str = ''
    show_image_caption: bool = True
    vault_root: Optional[str] = None
    use_native_strategy: bool = False
    fallback_on_mismatch: bool = True
    enforce_parity: bool = True
    parity_error_code: Optional[str] = None
