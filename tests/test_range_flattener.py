"""Tests for postreader.range_flattener module."""
from postreader.content_types import (
    ContentBlock,
    ContentEntity,
    EntityRange,
    InlineStyleRange,
    Segment,
)
from postreader.range_flattener import flatten_ranges, render_inline, render_segment

_LINK_ATTRS = 'target="_blank" rel="noopener noreferrer"'


def _bold(offset: int, length: int) -> InlineStyleRange:
    return InlineStyleRange(offset=offset, length=length, style="BOLD")


def _italic(offset: int, length: int) -> InlineStyleRange:
    return InlineStyleRange(offset=offset, length=length, style="ITALIC")


class TestFlattenRanges:
    def test_empty_text(self) -> None:
        assert flatten_ranges("", [_bold(0, 3)]) == []

    def test_no_ranges_single_segment(self) -> None:
        assert flatten_ranges("hello") == [Segment(text="hello")]

    def test_overlapping_styles(self) -> None:
        segments = flatten_ranges("0123456789", [_bold(0, 5), _italic(3, 5)])
        assert segments == [
            Segment(text="012", bold=True),
            Segment(text="34", bold=True, italic=True),
            Segment(text="567", italic=True),
            Segment(text="89"),
        ]

    def test_segments_cover_every_character_once(self) -> None:
        text = "The quick brown fox"
        segments = flatten_ranges(
            text,
            [_bold(4, 5), _italic(2, 10), _bold(15, 2)],
            [EntityRange(offset=8, length=6, key="0")],
        )
        assert "".join(s.text for s in segments) == text
        for prev, cur in zip(segments, segments[1:]):
            assert (prev.bold, prev.italic, prev.entity_key) != (
                cur.bold, cur.italic, cur.entity_key,
            )

    def test_later_entity_range_wins(self) -> None:
        segments = flatten_ranges(
            "0123456789",
            entity_ranges=[
                EntityRange(offset=0, length=6, key="A"),
                EntityRange(offset=5, length=3, key="B"),
            ],
        )
        assert segments == [
            Segment(text="01234", entity_key="A"),
            Segment(text="567", entity_key="B"),
            Segment(text="89"),
        ]

    def test_repeated_style_is_idempotent(self) -> None:
        segments = flatten_ranges("abcdef", [_bold(0, 4), _bold(2, 4)])
        assert segments == [Segment(text="abcdef", bold=True)]

    def test_style_name_case_insensitive(self) -> None:
        segments = flatten_ranges(
            "abc", [InlineStyleRange(offset=0, length=3, style="italic")],
        )
        assert segments == [Segment(text="abc", italic=True)]

    def test_unknown_style_ignored(self) -> None:
        segments = flatten_ranges(
            "abc", [InlineStyleRange(offset=0, length=3, style="UNDERLINE")],
        )
        assert segments == [Segment(text="abc")]


class TestClamping:
    def test_negative_offset_clamped(self) -> None:
        segments = flatten_ranges("abcdef", [_bold(-3, 5)])
        assert segments == [Segment(text="ab", bold=True), Segment(text="cdef")]

    def test_length_past_end_clamped(self) -> None:
        segments = flatten_ranges("abcdef", [_bold(4, 100)])
        assert segments == [Segment(text="abcd"), Segment(text="ef", bold=True)]

    def test_offset_past_end_ignored(self) -> None:
        segments = flatten_ranges(
            "abc", [_bold(10, 2)], [EntityRange(offset=7, length=1, key="0")],
        )
        assert segments == [Segment(text="abc")]

    def test_negative_length_ignored(self) -> None:
        assert flatten_ranges("abc", [_bold(1, -2)]) == [Segment(text="abc")]

    def test_non_integer_offset_ignored(self) -> None:
        bad = InlineStyleRange(offset="1", length=2, style="BOLD")  # type: ignore[arg-type]
        assert flatten_ranges("abc", [bad]) == [Segment(text="abc")]


class TestRenderSegment:
    def test_italic_wraps_bold(self) -> None:
        markup = render_segment(Segment(text="x", bold=True, italic=True), {})
        assert markup == "<em><strong>x</strong></em>"

    def test_plain_segment_escaped_and_linkified(self) -> None:
        markup = render_segment(Segment(text="a<b @bob"), {})
        assert markup == (
            f'a&lt;b <a href="https://x.com/bob" {_LINK_ATTRS}>@bob</a>'
        )

    def test_link_entity_wraps_outside_styles(self) -> None:
        entity_map = {"0": ContentEntity(type="LINK", data={"url": "https://example.com"})}
        markup = render_segment(
            Segment(text="go", bold=True, italic=True, entity_key="0"), entity_map,
        )
        assert markup == (
            f'<a href="https://example.com" {_LINK_ATTRS}><em><strong>go</strong></em></a>'
        )

    def test_entity_text_never_autolinked(self) -> None:
        entity_map = {"0": ContentEntity(type="LINK", data={"url": "https://example.com"})}
        markup = render_segment(Segment(text="@bob", entity_key="0"), entity_map)
        assert markup == f'<a href="https://example.com" {_LINK_ATTRS}>@bob</a>'

    def test_missing_entity_renders_plain_text(self) -> None:
        markup = render_segment(Segment(text="#tag", entity_key="9"), {})
        assert markup == "#tag"

    def test_link_href_escaped(self) -> None:
        entity_map = {"0": ContentEntity(type="LINK", data={"url": 'https://a.com/?q="x"&y'})}
        markup = render_segment(Segment(text="q", entity_key="0"), entity_map)
        assert 'href="https://a.com/?q=&quot;x&quot;&amp;y"' in markup


class TestRenderInline:
    def test_plain_fallback_has_no_emphasis(self) -> None:
        block = ContentBlock(text="Plain words & more")
        assert render_inline(block, {}) == "Plain words &amp; more"

    def test_overlap_example(self) -> None:
        block = ContentBlock(
            text="0123456789",
            inline_style_ranges=(_bold(0, 5), _italic(3, 5)),
        )
        assert render_inline(block, {}) == (
            "<strong>012</strong><em><strong>34</strong></em><em>567</em>89"
        )

    def test_javascript_link_dropped(self) -> None:
        block = ContentBlock(
            text="click me",
            entity_ranges=(EntityRange(offset=0, length=8, key="0"),),
        )
        entity_map = {"0": ContentEntity(type="LINK", data={"url": "javascript:alert(1)"})}
        markup = render_inline(block, entity_map)
        assert markup == "click me"
        assert "<a" not in markup

    def test_link_entity_non_mapping_data(self) -> None:
        block = ContentBlock(
            text="here",
            entity_ranges=(EntityRange(offset=0, length=4, key="0"),),
        )
        entity_map = {"0": ContentEntity(type="LINK", data=None)}  # type: ignore[arg-type]
        assert render_inline(block, entity_map) == "here"

    def test_idempotent(self) -> None:
        block = ContentBlock(
            text="Read @alice on #python at https://example.com",
            inline_style_ranges=(_bold(0, 4),),
        )
        assert render_inline(block, {}) == render_inline(block, {})
