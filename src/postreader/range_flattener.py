"""Flatten offset-based style and entity ranges into attributed segments.

Algorithm:
    1. Allocate per-character bold / italic / entity-key arrays.
    2. Apply style ranges in input order (flags are idempotent).
    3. Apply entity ranges in input order; later ranges overwrite earlier
       ones on overlap.
    4. Run-length encode consecutive characters with identical attributes.

Offsets and lengths are clamped to ``[0, len(text)]`` so malformed ranges
never raise.  O(N) time in text length.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence

from postreader.content_types import (
    ContentBlock,
    EntityMap,
    EntityRange,
    InlineStyleRange,
    Segment,
)
from postreader.html_utils import escape_html, sanitize_url
from postreader.linkify import external_link, linkify_escaped


def _clamp_span(offset: object, length: object, size: int) -> tuple[int, int]:
    """Clamp ``[offset, offset + length)`` into ``[0, size]``; empty on bad input."""
    if not isinstance(offset, int) or not isinstance(length, int):
        return (0, 0)
    start = min(max(offset, 0), size)
    end = min(max(offset + length, 0), size)
    return (start, max(start, end))


def flatten_ranges(
    text: str,
    style_ranges: Sequence[InlineStyleRange] = (),
    entity_ranges: Sequence[EntityRange] = (),
) -> list[Segment]:
    """Produce segments covering every character of *text* exactly once."""
    size = len(text)
    if size == 0:
        return []

    bold = [False] * size
    italic = [False] * size
    entity_key: list[str | None] = [None] * size

    for style_range in style_ranges:
        start, end = _clamp_span(style_range.offset, style_range.length, size)
        style = str(style_range.style).upper()
        if style == "BOLD":
            for i in range(start, end):
                bold[i] = True
        elif style == "ITALIC":
            for i in range(start, end):
                italic[i] = True

    for entity_range in entity_ranges:
        start, end = _clamp_span(entity_range.offset, entity_range.length, size)
        key = str(entity_range.key)
        for i in range(start, end):
            entity_key[i] = key

    segments: list[Segment] = []
    run_start = 0
    for i in range(1, size + 1):
        if (
            i < size
            and bold[i] == bold[run_start]
            and italic[i] == italic[run_start]
            and entity_key[i] == entity_key[run_start]
        ):
            continue
        segments.append(Segment(
            text=text[run_start:i],
            bold=bold[run_start],
            italic=italic[run_start],
            entity_key=entity_key[run_start],
        ))
        run_start = i
    return segments


def _link_href(entity_key: str, entity_map: EntityMap) -> str:
    entity = entity_map.get(entity_key)
    if entity is None or entity.type != "LINK":
        return ""
    data = entity.data if isinstance(entity.data, Mapping) else {}
    return sanitize_url(data.get("url"))


def render_segment(segment: Segment, entity_map: EntityMap) -> str:
    """Render one segment to inline markup.

    Nesting order, innermost first: text, ``<strong>``, ``<em>``, ``<a>``.
    Entity-covered text is never auto-linkified.
    """
    markup = escape_html(segment.text)
    if segment.entity_key is None:
        markup = linkify_escaped(markup)
    if segment.bold:
        markup = f"<strong>{markup}</strong>"
    if segment.italic:
        markup = f"<em>{markup}</em>"
    if segment.entity_key is not None:
        href = _link_href(segment.entity_key, entity_map)
        if href:
            markup = external_link(escape_html(href), markup)
    return markup


def render_inline(block: ContentBlock, entity_map: EntityMap) -> str:
    """Render a block's text with its styles and entities applied."""
    text = block.text if isinstance(block.text, str) else ""
    segments = flatten_ranges(text, block.inline_style_ranges, block.entity_ranges)
    return "".join(render_segment(seg, entity_map) for seg in segments)
