"""Resolve atomic blocks to media, code, or divider instructions.

The first entity range whose entity is a supported type with usable data
wins; ranges pointing at missing, unknown, or empty entities are skipped.
"""
from __future__ import annotations

import re
from collections.abc import Mapping

from postreader.content_types import (
    CodeBlock,
    ContentBlock,
    ContentEntity,
    Divider,
    EntityMap,
    Image,
)
from postreader.html_utils import escape_html, sanitize_url

type AtomicInstruction = Image | CodeBlock | Divider

_FENCE_OPEN_RE = re.compile(r"\A```(\w*)\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\Z")


def strip_code_fence(markdown: str) -> tuple[str, str]:
    """Strip a leading/trailing triple-backtick fence.

    Returns:
        ``(code, language)`` where *language* is the fence tag or ``""``.
    """
    language = ""
    open_match = _FENCE_OPEN_RE.match(markdown)
    if open_match:
        language = open_match.group(1)
        markdown = markdown[open_match.end():]
    return _FENCE_CLOSE_RE.sub("", markdown, count=1), language


def _entity_data(entity: ContentEntity) -> Mapping[str, object]:
    return entity.data if isinstance(entity.data, Mapping) else {}


def resolve_entity(
    entity: ContentEntity | None, *, anchor_id: str = "",
) -> AtomicInstruction | None:
    """Map one entity to its instruction, or None when unusable."""
    if entity is None:
        return None
    data = _entity_data(entity)
    match entity.type:
        case "MEDIA":
            url = sanitize_url(data.get("imageUrl"))
            if url:
                return Image(url=url, alt="", anchor_id=anchor_id)
        case "MARKDOWN":
            markdown = data.get("markdown")
            if isinstance(markdown, str) and markdown:
                code, language = strip_code_fence(markdown)
                return CodeBlock(
                    code=escape_html(code),
                    language=language,
                    anchor_id=anchor_id,
                )
        case "DIVIDER":
            return Divider(anchor_id=anchor_id)
        case _:
            # LINK and unknown types have no block-level rendering.
            return None
    return None


def resolve_atomic_block(
    block: ContentBlock, entity_map: EntityMap, *, anchor_id: str = "",
) -> AtomicInstruction | None:
    """Render an ``atomic`` block from the first usable entity it references."""
    for entity_range in block.entity_ranges:
        instruction = resolve_entity(
            entity_map.get(str(entity_range.key)), anchor_id=anchor_id,
        )
        if instruction is not None:
            return instruction
    return None
