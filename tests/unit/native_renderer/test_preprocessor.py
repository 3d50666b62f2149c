"""Unit tests for native_renderer.preprocessor module."""

import pytest

from src.native_renderer.preprocessor import (
    inject_hard_breaks,
    neutralize_plain_wikilinks,
    neutralize_unsafe_links,
    parse_fence_delimiter,
    preprocess_markdown,
    rewrite_image_embeds,
    strip_math_fence_indent,
)


class TestMathFenceIndent:

    def test_indented_math_fence_is_dedented(self):
        """Indented $$ delimiters are moved to column zero."""
        assert preprocess_markdown("   $$\nx+y\n$$") == "$$\nx+y\n$$"

    def test_only_leading_whitespace_before_fence(self):
        assert strip_math_fence_indent("\t$$ a") == "$$ a"


class TestRewriteImageEmbeds:

    def test_embed_with_alt(self):
        assert rewrite_image_embeds("![[a b.png|alt]]") == "![alt](a%20b.png)"

    def test_embed_without_alt(self):
        assert rewrite_image_embeds("![[pics/cat.png]]") == "![](pics/cat.png)"


class TestNeutralizeUnsafeLinks:
    """Test cases for neutralize_unsafe_links()."""

    @pytest.mark.parametrize("markdown", [
        "[x](javascript:alert(1))",
        "[x](VBScript:msgbox)",
        "[x](data:text/html,hi)",
    ])
    def test_script_links_are_escaped(self, markdown):
        assert neutralize_unsafe_links(markdown) == "\\" + markdown

    def test_images_are_untouched(self):
        markdown = "![x](data:image/png;base64,AA)"

        assert neutralize_unsafe_links(markdown) == markdown

    def test_already_escaped(self):
        markdown = "\\[x](javascript:alert(1))"

        assert neutralize_unsafe_links(markdown) == markdown

    def test_safe_links_are_untouched(self):
        markdown = "[x](https://example.com)"

        assert neutralize_unsafe_links(markdown) == markdown


class TestNeutralizePlainWikilinks:
    """Test cases for neutralize_plain_wikilinks()."""

    def test_plain_wikilink_is_escaped(self):
        assert neutralize_plain_wikilinks("see [[Note]]") == "see \\[[Note]]"

    def test_wikilink_at_line_start(self):
        assert neutralize_plain_wikilinks("[[Note|alias]] here") == "\\[[Note|alias]] here"

    def test_code_span_is_untouched(self):
        assert neutralize_plain_wikilinks("`[[Note]]` and [[B]]") == "`[[Note]]` and \\[[B]]"

    def test_fenced_block_is_untouched(self):
        markdown = "```\n[[Note]]\n```\n[[B]]"

        assert neutralize_plain_wikilinks(markdown) == "```\n[[Note]]\n```\n\\[[B]]"

    def test_embeds_are_untouched(self):
        assert neutralize_plain_wikilinks("![[a.png]]") == "![[a.png]]"


class TestInjectHardBreaks:
    """Test cases for inject_hard_breaks()."""

    def test_paragraph_lines(self):
        assert inject_hard_breaks("a\nb") == "a<br>\nb"

    def test_trailing_spaces_are_replaced(self):
        assert inject_hard_breaks("a \nb") == "a<br>\nb"

    def test_existing_hard_break_is_kept(self):
        assert inject_hard_breaks("a  \nb") == "a  \nb"
        assert inject_hard_breaks("a\\\nb") == "a\\\nb"

    def test_blank_line_separates_paragraphs(self):
        assert inject_hard_breaks("a\n\nb") == "a\n\nb"

    def test_heading_is_not_broken(self):
        assert inject_hard_breaks("# H\ntext") == "# H\ntext"

    def test_list_items(self):
        """Consecutive items stay separate; continuation lines get a break."""
        assert inject_hard_breaks("- a\n- b") == "- a\n- b"
        assert inject_hard_breaks("- a\ncontinued") == "- a<br>\ncontinued"

    def test_quote_lines_use_backslash_break(self):
        assert inject_hard_breaks("> a\n> b") == "> a\\\n> b"

    def test_callout_marker_line_is_left_alone(self):
        assert inject_hard_breaks("> [!tip] T\n> body") == "> [!tip] T\n> body"

    def test_fenced_code_is_untouched(self):
        markdown = "```\na\nb\n```"

        assert inject_hard_breaks(markdown) == markdown

    def test_math_block_is_untouched(self):
        markdown = "$$\na\nb\n$$"

        assert inject_hard_breaks(markdown) == markdown


class TestPreprocessMarkdown:

    def test_frontmatter_is_stripped_with_converter(self, converter):
        assert preprocess_markdown("---\nt: 1\n---\nbody", converter) == "body"

    def test_frontmatter_kept_without_converter(self):
        assert preprocess_markdown("---\nt: 1\n---\nbody").startswith("---")

    def test_parse_fence_delimiter(self):
        fence = parse_fence_delimiter("````python")

        assert fence.marker == '`'
        assert fence.length == 4
        assert parse_fence_delimiter("text") is None
