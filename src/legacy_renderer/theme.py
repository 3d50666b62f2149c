"""Theme definitions for the legacy markup dialect.

A Theme turns a tag kind ("p", "h2", "li p", "avatar-header", ...) into the
inline CSS string the publishing surface expects. Three layouts are
available (github, wechat, serif), combined with a color preset, a font
stack and a font size step.
"""

import math
from typing import Any, Dict, List, Optional


class Theme:
    """Inline style provider for the legacy generator.

    Attributes:
        theme_name: Layout name (github, wechat or serif)
        theme_color: Color preset name, or "custom"
        custom_color: Hex color used when theme_color is "custom"
        font_family: Font stack key (sans-serif, serif, monospace)
        font_size: Font size step from 1 to 5
        mac_code_block: Whether code blocks get a window header
        code_line_number: Whether code blocks get a line-number column
        side_padding: Horizontal padding of the outer section in px
        colored_header: Whether headings use the deep theme color
    """

    THEME_COLORS = {
        'blue': '#0366d6',
        'green': '#28a745',
        'purple': '#6f42c1',
        'orange': '#fd7e14',
        'teal': '#20c997',
        'rose': '#e83e8c',
        'ruby': '#dc3545',
        'slate': '#6c757d',
    }

    # Heading colors, 15-20% darker than the matching preset
    THEME_COLORS_DEEP = {
        'blue': '#004795',
        'green': '#1e7e34',
        'purple': '#4a2b82',
        'orange': '#c75e0b',
        'teal': '#158765',
        'rose': '#b81f66',
        'ruby': '#a81825',
        'slate': '#495057',
    }

    FONT_SIZES = {
        1: {'base': 14, 'h1': 30, 'h2': 24, 'h3': 18, 'h4': 16, 'h5': 14, 'h6': 14, 'code': 12, 'caption': 12},
        2: {'base': 15, 'h1': 32, 'h2': 26, 'h3': 20, 'h4': 17, 'h5': 15, 'h6': 15, 'code': 13, 'caption': 12},
        3: {'base': 16, 'h1': 34, 'h2': 28, 'h3': 22, 'h4': 18, 'h5': 16, 'h6': 16, 'code': 14, 'caption': 13},
        4: {'base': 17, 'h1': 38, 'h2': 30, 'h3': 24, 'h4': 20, 'h5': 17, 'h6': 17, 'code': 15, 'caption': 14},
        5: {'base': 18, 'h1': 42, 'h2': 34, 'h3': 26, 'h4': 22, 'h5': 18, 'h6': 18, 'code': 16, 'caption': 14},
    }

    FONTS = {
        'sans-serif': "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, 'Noto Sans', sans-serif",
        'serif': "'Times New Roman', Georgia, 'SimSun', serif",
        'monospace': "'SF Mono', Consolas, 'Liberation Mono', Menlo, Courier, monospace",
    }

    THEME_CONFIGS: Dict[str, Dict[str, Any]] = {
        'github': {
            'name': '简约',
            'line_height': 1.8,
            'paragraph_gap': 20,
            'h1_decoration': 'none',
            'h2_decoration': 'none',
            'h3_decoration': 'none',
            'h4_decoration': 'none',
            'text_color': '#3e3e3e',
            'link_decoration': 'underline',
            'blockquote_border_width': 4,
            'blockquote_style': 'border',
        },
        'wechat': {
            'name': '经典',
            'line_height': 1.8,
            'paragraph_gap': 24,
            'h1_decoration': 'bottom-line',
            'h2_decoration': 'bottom-line',
            'h3_decoration': 'left-border',
            'h4_decoration': 'light-bg',
            'text_color': '#3e3e3e',
            'link_decoration': 'none',
            'blockquote_border_width': 4,
            'blockquote_style': 'border',
        },
        'serif': {
            'name': '优雅',
            'line_height': 1.8,
            'paragraph_gap': 20,
            'h1_decoration': 'editorial-h1',
            'h2_decoration': 'editorial-h1',
            'h3_decoration': 'editorial-h2',
            'h4_decoration': 'editorial-h3',
            'text_color': '#3e3e3e',
            'link_decoration': 'none',
            'blockquote_border_width': 0,
            'blockquote_style': 'center',
        },
    }

    SPACING = {'xs': 4, 'sm': 8, 'md': 16, 'lg': 24, 'xl': 32, 'xxl': 48}
    RADIUS = {'sm': 4, 'md': 8, 'lg': 12}

    DEFAULT_HEADING_COLOR = '#3e3e3e'

    def __init__(
        self,
        theme: str = 'github',
        theme_color: str = 'blue',
        custom_color: Optional[str] = None,
        font_family: str = 'sans-serif',
        font_size: int = 3,
        mac_code_block: bool = True,
        code_line_number: bool = False,
        side_padding: int = 16,
        colored_header: bool = False,
    ):
        self.theme_name = theme
        self.theme_color = theme_color
        self.custom_color = custom_color
        self.font_family = font_family
        self.font_size = font_size
        self.mac_code_block = mac_code_block
        self.code_line_number = code_line_number
        self.side_padding = side_padding
        self.colored_header = colored_header

    def update(self, **options: Any) -> None:
        """Update any subset of the constructor options in place."""
        attribute_names = {'theme': 'theme_name'}
        for key, value in options.items():
            if value is None:
                continue
            name = attribute_names.get(key, key)
            if not hasattr(self, name):
                raise AttributeError(f"Unknown theme option: {key}")
            setattr(self, name, value)

    @property
    def color(self) -> str:
        """Current accent color as #RRGGBB."""
        if self.theme_color == 'custom' and self.custom_color:
            return self.custom_color
        return self.THEME_COLORS.get(self.theme_color, self.THEME_COLORS['blue'])

    @property
    def heading_color(self) -> str:
        if not self.colored_header:
            return self.DEFAULT_HEADING_COLOR
        if self.theme_color == 'custom' and self.custom_color:
            return self.adjust_color_brightness(self.custom_color, -20)
        return self.THEME_COLORS_DEEP.get(self.theme_color, self.THEME_COLORS_DEEP['blue'])

    @property
    def config(self) -> Dict[str, Any]:
        return self.THEME_CONFIGS.get(self.theme_name, self.THEME_CONFIGS['github'])

    @property
    def sizes(self) -> Dict[str, int]:
        return self.FONT_SIZES.get(self.font_size, self.FONT_SIZES[3])

    @property
    def font(self) -> str:
        return self.FONTS.get(self.font_family, self.FONTS['sans-serif'])

    @staticmethod
    def adjust_color_brightness(hex_color: str, percent: int) -> str:
        """Scale each RGB channel of hex_color by (100 + percent)%.

        Channels are clamped to 255.

        Args:
            hex_color: Color as #RRGGBB
            percent: Adjustment from -100 to 100

        Returns:
            Adjusted color as lowercase #rrggbb
        """
        value = hex_color.lstrip('#')
        channels = []
        for start in (0, 2, 4):
            channel = int(value[start:start + 2], 16)
            channel = int(math.floor(channel * (100 + percent) / 100 + 0.5))
            channels.append(min(max(channel, 0), 255))
        return '#' + ''.join(f'{channel:02x}' for channel in channels)

    @classmethod
    def theme_list(cls) -> List[Dict[str, str]]:
        return [{'value': key, 'label': config['name']} for key, config in cls.THEME_CONFIGS.items()]

    @classmethod
    def color_list(cls) -> List[Dict[str, str]]:
        return [{'value': key, 'color': value} for key, value in cls.THEME_COLORS.items()]

    def get_style(self, tag: str) -> str:
        """Return the inline CSS for a tag kind, or '' if the kind is unstyled."""
        config = self.config
        sizes = self.sizes
        font = self.font
        color = self.color
        heading_color = self.heading_color
        s = self.SPACING
        r = self.RADIUS
        text_color = config['text_color']
        line_height = config['line_height']

        if tag == 'section':
            return (
                f"font-family: {font}; font-size: {sizes['base']}px; line-height: {line_height}; "
                f"color: {text_color}; padding: 20px {self.side_padding}px; background: #ffffff; "
                f"max-width: 100%; word-wrap: break-word; text-align: justify;"
            )
        if tag in ('h1', 'h2', 'h3', 'h4'):
            return self._heading_style(tag, config[f'{tag}_decoration'], color, sizes[tag], font, heading_color)
        if tag in ('h5', 'h6'):
            return (
                f"font-family: {font}; font-size: {sizes[tag]}px; font-weight: bold; "
                f"color: {heading_color}; margin: 10px 0; text-align: left; line-height: 1.4;"
            )
        if tag == 'p':
            return (
                f"font-family: {font}; font-size: {sizes['base']}px; line-height: {line_height}; "
                f"color: {text_color}; margin: 0 0 {config['paragraph_gap']}px 0; "
                f"text-align: justify; letter-spacing: 0;"
            )
        if tag == 'blockquote':
            return self._blockquote_style(color)
        if tag == 'pre':
            return (
                f"background: #f6f8fa; border: 1px solid #e1e4e8; border-radius: {r['md']}px; "
                f"padding: {s['md']}px; margin: {s['md']}px 0; overflow-x: auto; "
                f"font-family: {self.FONTS['monospace']}; font-size: {sizes['code']}px; "
                f"line-height: 1.6; color: #24292e;"
            )
        if tag == 'code':
            return (
                f"background: {color}1A; color: {color}; padding: 2px 4px; border-radius: 3px; "
                f"font-family: {self.FONTS['monospace']}; font-size: {sizes['code']}px;"
            )
        if tag in ('ul', 'ol'):
            list_type = 'disc' if tag == 'ul' else 'decimal'
            return (
                f"font-family: {font}; font-size: {sizes['base']}px; line-height: {line_height}; "
                f"color: {text_color}; margin: 12px 0; padding-left: 20px; list-style-type: {list_type};"
            )
        if tag == 'li':
            return f"font-size: {sizes['base']}px; line-height: {line_height}; color: {text_color}; margin: 4px 0;"
        if tag == 'li p':
            return f"margin: 0; padding: 0; line-height: {line_height};"
        if tag == 'figure':
            return (
                f"display: block; margin: 20px 0; text-align: center; border: 1px solid #e1e4e8; "
                f"border-radius: {r['md']}px; padding: 10px;"
            )
        if tag == 'figcaption':
            return f"font-size: {sizes['caption']}px; color: #999; text-align: center; margin-top: {s['sm']}px;"
        if tag == 'img':
            return "display: block; margin: 0 auto; max-width: 100%; border-radius: 4px;"
        if tag == 'a':
            decoration = config['link_decoration']
            border = f"1px dashed {color}" if decoration == 'none' else 'none'
            return f"color: {color}; text-decoration: {decoration}; border-bottom: {border};"
        if tag == 'table':
            return f"border-collapse: collapse; width: 100%; margin: {s['md']}px 0; border: 1px solid #e1e4e8;"
        if tag == 'th':
            return (
                f"background: {color}1F; font-weight: bold; color: {text_color}; "
                f"border: 1px solid #e1e4e8; padding: 12px; text-align: left;"
            )
        if tag == 'td':
            return "border: 1px solid #e1e4e8; padding: 12px; text-align: left;"
        if tag == 'thead':
            return "background: #f6f8fa;"
        if tag == 'hr':
            return "border: 0; border-top: 1px solid rgba(0,0,0,0.08); margin: 40px 0;"
        if tag == 'strong':
            return f"font-weight: bold; color: {color};"
        if tag == 'em':
            return "font-style: italic;"
        if tag == 'del':
            return "text-decoration: line-through; color: #999;"
        if tag == 'avatar-header':
            return (
                f"margin: 0 0 {s['sm']}px 0 !important; display: flex !important; "
                f"align-items: center !important; justify-content: flex-start !important; width: 100%; "
                f"flex-direction: row !important; flex-wrap: nowrap !important; text-align: left !important;"
            )
        if tag == 'avatar':
            return (
                "display: inline-block !important; vertical-align: middle !important; margin: 0 !important; "
                "width: 32px !important; height: 32px !important; border-radius: 50%; object-fit: cover; "
                "border: 1px solid #e8e8ed; flex-shrink: 0;"
            )
        if tag == 'avatar-caption':
            return (
                f"display: inline-block !important; vertical-align: middle !important; "
                f"font-size: {sizes['caption']}px; color: #666; margin-left: 10px; line-height: 1.4; "
                f"text-align: left !important;"
            )
        return ''

    def _blockquote_style(self, color: str) -> str:
        config = self.config
        base = self.sizes['base']
        md = self.SPACING['md']
        if config['blockquote_style'] == 'center':
            return (
                f"font-family: {self.FONTS['serif']}; font-size: {base}px; line-height: 1.8; color: #555; "
                f"background: {color}1F; margin: 30px 60px; padding: 20px; text-align: center; "
                f"border: none; position: relative; border-radius: 4px;"
            )
        if self.theme_name == 'wechat':
            return (
                f"font-size: {base}px; line-height: {config['line_height']}; color: #595959; "
                f"background: {color}1F; margin: {md}px 0 {md}px 4px; padding: {md}px; "
                f"border-left: 3px solid {color}99; border-radius: 3px;"
            )
        return (
            f"font-size: {base}px; line-height: {config['line_height']}; color: #595959; "
            f"background: {color}1F; margin: {md}px 0; padding: {md}px; "
            f"border-left: {config['blockquote_border_width']}px solid {color}; border-radius: 3px;"
        )

    def _heading_style(self, tag: str, decoration: str, color: str, size: int, font: str, heading_color: str) -> str:
        serif = self.FONTS['serif']
        golden_line = (
            f"background-image: linear-gradient(to right, transparent, {color}, transparent); "
            f"background-size: 100px 1px; background-repeat: no-repeat; background-position: bottom center; "
            f"padding-bottom: 20px; letter-spacing: 1px;"
        )

        if tag == 'h1':
            base = (
                f"font-family: {font}; display: block; font-size: {size}px; font-weight: bold; "
                f"margin: 30px auto 20px; color: {heading_color}; text-align: center; line-height: 1.2;"
            )
            if decoration == 'editorial-h1':
                return (
                    f"font-family: {serif}; display: block; font-size: {size}px; font-weight: bold; "
                    f"margin: 30px auto 20px; color: {heading_color}; text-align: center; line-height: 1.2; "
                    f"{golden_line}"
                )
            if decoration == 'bottom-line':
                return (
                    f"{base} background-image: linear-gradient(to right, {color}, {color}); "
                    f"background-size: 80px 3px; background-repeat: no-repeat; "
                    f"background-position: bottom center; padding-bottom: 15px;"
                )
            return base

        if tag == 'h2':
            base = (
                f"font-family: {font}; display: block; font-size: {size}px; font-weight: bold; "
                f"margin: 40px auto 20px; text-align: center; color: {heading_color}; line-height: 1.25;"
            )
            if decoration == 'editorial-h1':
                return (
                    f"font-family: {serif}; display: block; font-size: {size}px; font-weight: bold; "
                    f"margin: 40px auto 20px; color: {heading_color}; text-align: center; line-height: 1.2; "
                    f"{golden_line}"
                )
            if decoration == 'bottom-line':
                return (
                    f"{base} background-image: linear-gradient(to right, {color}, {color}); "
                    f"background-size: 50px 2px; background-repeat: no-repeat; "
                    f"background-position: bottom center; padding-bottom: 12px;"
                )
            return base

        if tag == 'h3':
            base = (
                f"font-family: {font}; display: block; font-size: {size}px; font-weight: bold; "
                f"margin: 24px 0 16px; text-align: left; color: {heading_color}; line-height: 1.3;"
            )
            if decoration == 'editorial-h2':
                return (
                    f"font-family: {serif}; display: block; font-size: {size}px; font-weight: normal; "
                    f"margin: 30px 0 16px; text-align: left; color: {heading_color}; line-height: 1.4; "
                    f"font-style: italic; letter-spacing: 1px;"
                )
            if decoration == 'left-border':
                return f"{base} border-left: 4px solid {color}; padding-left: 10px;"
            return base

        base = (
            f"font-family: {font}; display: block; font-size: {size}px; font-weight: bold; "
            f"margin: 15px 0 10px; text-align: left; color: {heading_color}; line-height: 1.35;"
        )
        if decoration == 'editorial-h3':
            return (
                f"font-family: {serif}; display: block; font-size: {size}px; font-weight: bold; "
                f"margin: 15px 0 10px; text-align: left; color: {heading_color}; line-height: 1.35; "
                f"border-bottom: 1px solid {color}; padding-bottom: 3px; display: inline-block; "
                f"width: auto; letter-spacing: 0.5px;"
            )
        if decoration == 'light-bg':
            return f"{base} background-color: {color}15; padding: 4px 8px; border-radius: 4px; display: inline-block;"
        return base
