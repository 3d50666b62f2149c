"""Unit tests for legacy_renderer.theme module."""

import pytest

from src.legacy_renderer import Theme


class TestThemeColors:
    """Test cases for color resolution."""

    def test_default_color_is_blue(self):
        assert Theme().color == '#0366d6'

    def test_preset_color(self):
        assert Theme(theme_color='green').color == '#28a745'

    def test_unknown_preset_falls_back_to_blue(self):
        assert Theme(theme_color='nope').color == '#0366d6'

    def test_custom_color(self):
        assert Theme(theme_color='custom', custom_color='#123456').color == '#123456'

    def test_heading_color_default(self):
        """Headings are neutral unless colored_header is set."""
        assert Theme().heading_color == '#3e3e3e'

    def test_heading_color_deep_preset(self):
        assert Theme(colored_header=True).heading_color == '#004795'

    def test_heading_color_custom_is_darkened(self):
        theme = Theme(theme_color='custom', custom_color='#646464', colored_header=True)
        assert theme.heading_color == '#505050'


class TestAdjustColorBrightness:
    """Test cases for Theme.adjust_color_brightness()."""

    @pytest.mark.parametrize("color,percent,expected", [
        ('#808080', 50, '#c0c0c0'),
        ('#ffffff', 20, '#ffffff'),
        ('#646464', -20, '#505050'),
        ('#000000', 100, '#000000'),
    ])
    def test_adjust(self, color, percent, expected):
        assert Theme.adjust_color_brightness(color, percent) == expected


class TestThemeStyles:
    """Test cases for Theme.get_style()."""

    def test_unknown_tag_is_unstyled(self):
        assert Theme().get_style('marquee') == ''

    def test_font_size_step_changes_base_size(self):
        assert 'font-size: 14px;' in Theme(font_size=1).get_style('p')
        assert 'font-size: 18px;' in Theme(font_size=5).get_style('p')

    def test_side_padding(self):
        assert 'padding: 20px 24px;' in Theme(side_padding=24).get_style('section')

    def test_link_decoration_follows_layout(self):
        assert 'text-decoration: underline;' in Theme(theme='github').get_style('a')
        assert 'border-bottom: 1px dashed' in Theme(theme='wechat').get_style('a')

    def test_every_layout_styles_headings(self):
        for entry in Theme.theme_list():
            theme = Theme(theme=entry['value'])
            for tag in ('h1', 'h2', 'h3', 'h4', 'h5', 'h6'):
                assert theme.get_style(tag), f"{entry['value']} has no style for {tag}"

    def test_color_flows_into_styles(self):
        assert 'color: #6f42c1;' in Theme(theme_color='purple').get_style('strong')


class TestThemeUpdate:
    """Test cases for Theme.update()."""

    def test_update_known_options(self):
        theme = Theme()
        theme.update(theme='wechat', font_size=2, custom_color=None)

        assert theme.theme_name == 'wechat'
        assert theme.font_size == 2
        assert theme.custom_color is None

    def test_update_unknown_option_raises(self):
        with pytest.raises(AttributeError, match="Unknown theme option"):
            Theme().update(bogus=1)

    def test_lists(self):
        assert {'value': 'github', 'label': '简约'} in Theme.theme_list()
        assert {'value': 'blue', 'color': '#0366d6'} in Theme.color_list()
