"""Command-line interface for rendering Markdown files.

This package provides the `md-render` CLI tool, its YAML configuration
loader and its Rich terminal output.
"""

from .config import ConfigLoader, settings_to_flags, settings_to_theme
from .errors import CLIError, ConfigError, ConfigFilesystemError
from .models import ExitCode, RenderSettings

__all__ = [
    'ConfigLoader',
    'settings_to_flags',
    'settings_to_theme',
    'CLIError',
    'ConfigError',
    'ConfigFilesystemError',
    'ExitCode',
    'RenderSettings',
]
