"""YAML configuration loading and validation for md-render.

Configuration file structure (every key optional):
    theme: github
    theme_color: blue
    font_size: 3
    mac_code_block: true
    vault_root: ./vault
    use_native_strategy: false
    fallback_on_mismatch: true
    enforce_parity: true
    parity_error_code: PARITY_MISMATCH
"""

import logging
import os
import re
from dataclasses import asdict, fields
from typing import Any, Dict

import yaml

from src.legacy_renderer import Theme, clean_html_for_draft
from src.render_pipeline import RenderFlags

from .errors import ConfigError, ConfigFilesystemError
from .models import RenderSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = '.md-render.yaml'
HEX_COLOR_PATTERN = re.compile(r'^#[0-9a-fA-F]{6}$')


class ConfigLoader:
    """Handles configuration file loading, validation, and saving."""

    DEFAULTS: Dict[str, Any] = asdict(RenderSettings())

    BOOL_FIELDS = {
        'mac_code_block', 'code_line_number', 'colored_header', 'show_image_caption',
        'use_native_strategy', 'fallback_on_mismatch', 'enforce_parity',
    }
    INT_FIELDS = {'font_size', 'side_padding'}

    @classmethod
    def load(cls, config_path: str) -> RenderSettings:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            RenderSettings with defaults for absent keys

        Raises:
            ConfigFilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigFilesystemError(config_path, 'read', 'Configuration file not found')
        except PermissionError:
            raise ConfigFilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise ConfigFilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        settings = cls._parse_config(config_dict)
        logger.debug(f"Loaded configuration from {config_path}")
        return settings

    @classmethod
    def save(cls, config_path: str, settings: RenderSettings) -> None:
        """Save configuration to a YAML file.

        Raises:
            ConfigFilesystemError: If file cannot be written
        """
        yaml_str = yaml.safe_dump(
            asdict(settings),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )

        config_dir = os.path.dirname(config_path)
        try:
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise ConfigFilesystemError(config_path, 'write', 'Permission denied')
        except OSError as e:
            raise ConfigFilesystemError(config_path, 'write', str(e))

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> RenderSettings:
        known = {f.name for f in fields(RenderSettings)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

        values = {**cls.DEFAULTS, **{k: v for k, v in config_dict.items() if v is not None}}

        for name in cls.BOOL_FIELDS:
            if not isinstance(values[name], bool):
                raise ConfigError(f"must be true or false, got {values[name]!r}", name)
        for name in cls.INT_FIELDS:
            if isinstance(values[name], bool) or not isinstance(values[name], int):
                raise ConfigError(f"must be an integer, got {values[name]!r}", name)

        if values['theme'] not in Theme.THEME_CONFIGS:
            raise ConfigError(
                f"unknown theme '{values['theme']}', expected one of {', '.join(Theme.THEME_CONFIGS)}",
                'theme',
            )
        if values['theme_color'] != 'custom' and values['theme_color'] not in Theme.THEME_COLORS:
            raise ConfigError(f"unknown color '{values['theme_color']}'", 'theme_color')
        if values['theme_color'] == 'custom' and not HEX_COLOR_PATTERN.match(str(values['custom_color'] or '')):
            raise ConfigError("custom color must be a #RRGGBB value", 'custom_color')
        if values['font_family'] not in Theme.FONTS:
            raise ConfigError(f"unknown font family '{values['font_family']}'", 'font_family')
        if values['font_size'] not in Theme.FONT_SIZES:
            raise ConfigError("must be between 1 and 5", 'font_size')

        return RenderSettings(**values)


def settings_to_theme(settings: RenderSettings) -> Theme:
    return Theme(
        theme=settings.theme,
        theme_color=settings.theme_color,
        custom_color=settings.custom_color,
        font_family=settings.font_family,
        font_size=settings.font_size,
        mac_code_block=settings.mac_code_block,
        code_line_number=settings.code_line_number,
        side_padding=settings.side_padding,
        colored_header=settings.colored_header,
    )


def settings_to_flags(settings: RenderSettings) -> RenderFlags:
    """Build pipeline flags; the draft cleaner is the default parity transform."""
    flags = RenderFlags.from_mapping(asdict(settings))
    flags.parity_transform = clean_html_for_draft
    return flags
