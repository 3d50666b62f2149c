"""Unit tests for transcoder helper modules (node_kinds, images)."""

import pytest

from src.legacy_renderer import new_container
from src.transcoder import NodeKind, classify
from src.transcoder.images import (
    SKIP_STYLE_MARKER,
    build_parity_alt,
    canonicalize_relative_url,
    convert_standalone_images,
    extract_width_hint,
    looks_like_image_src,
    normalize_host_image_src,
)
from src.transcoder.node_kinds import allowed_attributes, is_host_only_attribute, kept_classes


class TestNodeKinds:
    """Test cases for node classification and attribute policies."""

    @pytest.mark.parametrize("tag,kind", [
        ('a', NodeKind.ANCHOR),
        ('IMG', NodeKind.IMAGE),
        ('section', NodeKind.SECTION),
        ('pre', NodeKind.CODE),
        ('script', NodeKind.UNSAFE),
        ('p', NodeKind.ELEMENT),
        ('', NodeKind.ELEMENT),
    ])
    def test_classify(self, tag, kind):
        assert classify(tag) is kind

    def test_every_kind_has_policies(self):
        for kind in NodeKind:
            allowed_attributes(kind, False)
            allowed_attributes(kind, True)
            kept_classes(kind, [], False)

    def test_code_language_classes_survive_until_final_stage(self):
        classes = ['language-python', 'other']

        assert kept_classes(NodeKind.CODE, classes, final_stage=False) == ['language-python']
        assert kept_classes(NodeKind.CODE, classes, final_stage=True) == []

    def test_host_only_attributes(self):
        assert is_host_only_attribute('data-heading')
        assert is_host_only_attribute('ID')
        assert not is_host_only_attribute('style')


class TestImageHelpers:
    """Test cases for image source and hint helpers."""

    @pytest.mark.parametrize("src,expected", [
        ("a.png", True),
        ("a.JPG?x=1", True),
        ("https://example.com/img", True),
        ("data:image/png;base64,AA", True),
        ("file.pdf", False),
        ("", False),
    ])
    def test_looks_like_image_src(self, src, expected):
        assert looks_like_image_src(src) is expected

    @pytest.mark.parametrize("url,expected", [
        ("a b/c.png", "a%20b/c.png"),
        ("a%20b.png", "a%20b.png"),
        ("#frag", "#frag"),
        ("https://example.com/a b", "https://example.com/a b"),
        ("//cdn/x.png", "//cdn/x.png"),
    ])
    def test_canonicalize_relative_url(self, url, expected):
        assert canonicalize_relative_url(url) == expected

    def test_normalize_host_image_src(self):
        assert normalize_host_image_src("app://obsidian.md/assets/a%20b.png") == "assets/a%20b.png"
        assert normalize_host_image_src("https://example.com/x.png") == "https://example.com/x.png"

    @pytest.mark.parametrize("text,expected", [
        ("pic|300", "300"),
        ("![[a.png|640x480]]", "640"),
        ("max-width: 250px", "250"),
        ("  512 ", "512"),
        ("pic", ""),
        ("7", ""),
    ])
    def test_extract_width_hint(self, text, expected):
        assert extract_width_hint(text) == expected

    def test_build_parity_alt_from_style(self):
        container = new_container('<img alt="pic" style="width: 120px;" src="a.png">')

        assert build_parity_alt(container.img, "pic") == "pic|120"

    def test_build_parity_alt_keeps_sized_alt(self):
        container = new_container('<img alt="pic|80" src="a.png">')

        assert build_parity_alt(container.img, "pic|80") == "pic|80"

    def test_build_parity_alt_empty(self):
        container = new_container('<img src="a.png" width="300">')

        assert build_parity_alt(container.img, "") == ""


class TestConvertStandaloneImages:
    """Test cases for convert_standalone_images()."""

    def test_image_becomes_figure(self, converter):
        container = new_container('<p><img alt="cat" src="cat.png"></p>')

        assert convert_standalone_images(container, converter) == 1
        assert container.find('figure') is not None

    def test_non_image_source_is_marked_unstyled(self, converter):
        container = new_container('<p><img alt="doc" src="file.pdf"></p>')

        assert convert_standalone_images(container, converter) == 0
        img = container.find('img')
        assert img[SKIP_STYLE_MARKER] == '1'
        assert SKIP_STYLE_MARKER == 'data-skip-style'
