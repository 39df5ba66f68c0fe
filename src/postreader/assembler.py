"""Assemble rendering instructions and navigation anchors.

Two input paths:
- structured: content blocks -> groups -> one instruction per group,
  anchored ``section-block-{group_index}``;
- plain text: paragraphs (and, for articles, detected headings) anchored
  ``{prefix}-{position}``.

Anchor ids are a pure function of position, so identical input always yields
identical ids.  No exception escapes: a group that fails to render degrades
to its escaped text.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import assert_never

from postreader.block_grouper import group_blocks
from postreader.content_types import (
    HEADER_LEVELS,
    Article,
    Blockquote,
    BlockGroup,
    CodeBlock,
    ContentBlock,
    EntityMap,
    Heading,
    Instruction,
    ListBlock,
    ListGroup,
    Paragraph,
    ReflowMode,
    RenderedArticle,
    SingleGroup,
    Spacer,
    TocSection,
)
from postreader.entity_resolver import resolve_atomic_block
from postreader.headings import split_heading_chunks
from postreader.html_utils import escape_html, sanitize_url, strip_markup, truncate_label
from postreader.paragraphs import DEFAULT_REFLOW, ReflowStrategy, paragraph_markup
from postreader.range_flattener import render_inline

log = logging.getLogger(__name__)

BLOCK_ANCHOR_PREFIX = "section-block"
ARTICLE_ANCHOR_PREFIX = "section-article"
TITLE_ANCHOR_ID = "section-article-title"
DETECTED_HEADING_LEVEL = 2
TOC_LABEL_CHARS = 48

_RENDER_ERRORS = (TypeError, ValueError, KeyError, AttributeError)


# ---------------------------------------------------------------------------
# Structured path
# ---------------------------------------------------------------------------


def _render_single(
    block: ContentBlock, entity_map: EntityMap, anchor_id: str,
) -> Instruction | None:
    if block.type == "atomic":
        resolved = resolve_atomic_block(block, entity_map, anchor_id=anchor_id)
        if resolved is None:
            log.debug("Atomic block %s resolved to nothing; omitted", anchor_id)
        return resolved

    text = block.text if isinstance(block.text, str) else ""
    if not text.strip():
        return Spacer(anchor_id=anchor_id)

    markup = render_inline(block, entity_map)
    level = HEADER_LEVELS.get(block.type)
    if level is not None:
        return Heading(level=level, markup=markup, anchor_id=anchor_id)
    if block.type == "blockquote":
        return Blockquote(markup=markup, anchor_id=anchor_id)
    if block.type == "code-block":
        return CodeBlock(code=markup, anchor_id=anchor_id)
    # unstyled and anything unrecognized
    return Paragraph(markup=markup, anchor_id=anchor_id)


def _render_group(
    group: BlockGroup, entity_map: EntityMap, anchor_id: str,
) -> Instruction | None:
    match group:
        case ListGroup(ordered=ordered, items=items):
            return ListBlock(
                ordered=ordered,
                items=tuple(render_inline(item, entity_map) for item in items),
                anchor_id=anchor_id,
            )
        case SingleGroup(block=block):
            return _render_single(block, entity_map, anchor_id)
        case _:
            assert_never(group)


def _fallback_text(group: BlockGroup) -> str:
    blocks = group.items if isinstance(group, ListGroup) else (group.block,)
    return "\n".join(b.text for b in blocks if isinstance(b.text, str) and b.text)


def render_blocks(
    blocks: Sequence[ContentBlock], entity_map: EntityMap | None = None,
) -> list[Instruction]:
    """Render structured content blocks to an ordered instruction list."""
    entity_map = entity_map if entity_map is not None else {}
    instructions: list[Instruction] = []
    for group_index, group in enumerate(group_blocks(blocks)):
        anchor_id = f"{BLOCK_ANCHOR_PREFIX}-{group_index}"
        try:
            rendered = _render_group(group, entity_map, anchor_id)
        except _RENDER_ERRORS as exc:
            log.warning("Group %s failed to render (%s); falling back to text", anchor_id, exc)
            text = _fallback_text(group)
            rendered = (
                Paragraph(markup=escape_html(text), anchor_id=anchor_id) if text else None
            )
        if rendered is not None:
            instructions.append(rendered)
    return instructions


# ---------------------------------------------------------------------------
# Plain-text path
# ---------------------------------------------------------------------------


def render_plain_text(
    text: str,
    mode: ReflowMode = "article",
    *,
    anchor_prefix: str = ARTICLE_ANCHOR_PREFIX,
    detect_headings: bool = True,
    strategy: ReflowStrategy = DEFAULT_REFLOW,
) -> list[Instruction]:
    """Render unstructured text as paragraphs, with headings for articles.

    Heading detection only runs in ``article`` mode.  Detected headings are
    escaped but not linkified.
    """
    if not isinstance(text, str):
        return []
    text = text.strip()
    if not text:
        return []

    items: list[tuple[str, str]] = []   # (kind, content)
    headings = strategy.detect_headings(text) if mode == "article" and detect_headings else []
    if headings:
        for chunk in split_heading_chunks(text, headings):
            if chunk.heading is not None:
                items.append(("heading", chunk.heading.text))
            for paragraph in strategy.paragraphize(chunk.body, mode):
                items.append(("paragraph", paragraph))
    else:
        items.extend(("paragraph", p) for p in strategy.paragraphize(text, mode))

    instructions: list[Instruction] = []
    for position, (kind, content) in enumerate(items):
        anchor_id = f"{anchor_prefix}-{position}"
        if kind == "heading":
            instructions.append(Heading(
                level=DETECTED_HEADING_LEVEL,
                markup=escape_html(content),
                anchor_id=anchor_id,
            ))
        else:
            instructions.append(Paragraph(
                markup=paragraph_markup(content), anchor_id=anchor_id,
            ))
    return instructions


# ---------------------------------------------------------------------------
# Article envelope + navigation
# ---------------------------------------------------------------------------

_AVATAR_SIZE_SUFFIX_RE = re.compile(r"_(normal|bigger|mini)(?=\.[a-z0-9]+$)", re.IGNORECASE)
_PROFILE_IMAGE_RE = re.compile(r"/profile_images/", re.IGNORECASE)


def _normalize_avatar_url(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        return ""
    without_query = trimmed.split("#")[0].split("?")[0]
    return _AVATAR_SIZE_SUFFIX_RE.sub("", without_query).lower()


def select_cover_image(cover_url: str, author_avatar_url: str = "") -> str:
    """Return the cover image URL unless it is really the author's avatar."""
    cover = sanitize_url(cover_url)
    if not cover or _PROFILE_IMAGE_RE.search(cover):
        return ""
    avatar = author_avatar_url.strip() if isinstance(author_avatar_url, str) else ""
    if not avatar:
        return cover
    normalized_cover = _normalize_avatar_url(cover)
    if normalized_cover and normalized_cover == _normalize_avatar_url(avatar):
        return ""
    return cover


def build_toc(instructions: Sequence[Instruction], title: str = "") -> list[TocSection]:
    """Navigation entries for the title and every heading, in document order."""
    sections: list[TocSection] = []
    if title.strip():
        sections.append(TocSection(
            id=TITLE_ANCHOR_ID, label=truncate_label(title, TOC_LABEL_CHARS), kind="title",
        ))
    for instruction in instructions:
        if not isinstance(instruction, Heading) or not instruction.anchor_id:
            continue
        label = truncate_label(strip_markup(instruction.markup), TOC_LABEL_CHARS)
        if label:
            sections.append(TocSection(id=instruction.anchor_id, label=label, kind="heading"))
    return sections


def render_article(
    article: Article,
    *,
    author_avatar_url: str = "",
    strategy: ReflowStrategy = DEFAULT_REFLOW,
) -> RenderedArticle:
    """Render an article: structured blocks when present, else its plain text."""
    if article.content_blocks:
        blocks = render_blocks(article.content_blocks, article.entity_map)
    else:
        blocks = render_plain_text(article.plain_text, "article", strategy=strategy)

    title = article.title.strip() if isinstance(article.title, str) else ""
    return RenderedArticle(
        title=escape_html(title),
        title_anchor_id=TITLE_ANCHOR_ID if title else "",
        cover_image_url=select_cover_image(article.cover_image_url, author_avatar_url),
        blocks=tuple(blocks),
        toc=tuple(build_toc(blocks, title)),
    )
