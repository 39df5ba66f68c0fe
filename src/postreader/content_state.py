"""Tolerant adapter from raw platform ``content_state`` payloads to records.

Payloads come from a third-party API and are treated as untrusted: every
field is type-checked, malformed records are dropped (logged at DEBUG), and
nothing here raises on bad input.

Entity maps arrive in two shapes:
- object form: ``{"0": {"type": ..., "data": {...}}, ...}``
- list form:   ``[{"key": "0", "value": {"type": ..., "data": {...}}}, ...]``

MEDIA entities reference media by id; when the caller supplies the post's
media entities, each MEDIA entity gains an ``imageUrl`` resolved through
``mediaItems[].mediaId``.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import orjson

from postreader.content_types import (
    BLOCK_TYPES,
    ENTITY_TYPES,
    ContentBlock,
    ContentEntity,
    EntityRange,
    InlineStyleRange,
)
from postreader.html_utils import compact_text

log = logging.getLogger(__name__)

type UnknownRecord = dict[str, Any]


# ---------------------------------------------------------------------------
# Shape coercion
# ---------------------------------------------------------------------------


def _as_record(value: object) -> UnknownRecord | None:
    return value if isinstance(value, dict) else None


def _as_records(value: object) -> list[UnknownRecord]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_maybe_json(value: object) -> object:
    """Decode a JSON object/array string; anything else yields None."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed.startswith(("{", "[")):
        return None
    try:
        return orjson.loads(trimmed)
    except orjson.JSONDecodeError:
        return None


# ---------------------------------------------------------------------------
# Ranges and blocks
# ---------------------------------------------------------------------------


def _parse_style_ranges(value: object) -> tuple[InlineStyleRange, ...]:
    ranges: list[InlineStyleRange] = []
    for item in _as_records(value):
        offset, length, style = item.get("offset"), item.get("length"), item.get("style")
        if _is_int(offset) and _is_int(length) and isinstance(style, str):
            ranges.append(InlineStyleRange(offset=offset, length=length, style=style))
        else:
            log.debug("Dropping malformed style range: %r", item)
    return tuple(ranges)


def _parse_entity_ranges(value: object) -> tuple[EntityRange, ...]:
    ranges: list[EntityRange] = []
    for item in _as_records(value):
        offset, length, key = item.get("offset"), item.get("length"), item.get("key")
        if _is_int(offset) and _is_int(length) and (_is_int(key) or isinstance(key, str)):
            ranges.append(EntityRange(offset=offset, length=length, key=str(key)))
        else:
            log.debug("Dropping malformed entity range: %r", item)
    return tuple(ranges)


def _parse_block(raw: UnknownRecord) -> ContentBlock:
    block_type = _as_str(raw.get("type")) or "unstyled"
    if block_type not in BLOCK_TYPES:
        log.debug("Unknown block type %r rendered as unstyled", block_type)
        block_type = "unstyled"
    depth = raw.get("depth")
    return ContentBlock(
        type=block_type,  # type: ignore[arg-type]
        text=_as_str(raw.get("text")) or "",
        inline_style_ranges=_parse_style_ranges(raw.get("inlineStyleRanges")),
        entity_ranges=_parse_entity_ranges(raw.get("entityRanges")),
        depth=depth if _is_int(depth) else 0,
    )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


def _media_url_map(media_entities: list[UnknownRecord] | None) -> dict[str, str]:
    urls: dict[str, str] = {}
    for entity in _as_records(media_entities):
        media_id = entity.get("media_id")
        media_info = _as_record(entity.get("media_info")) or {}
        url = _as_str(media_info.get("original_img_url"))
        if (isinstance(media_id, str) or _is_int(media_id)) and url:
            urls[str(media_id)] = url
    return urls


def _resolve_media_url(data: Mapping[str, Any], media_urls: dict[str, str]) -> str | None:
    for item in _as_records(data.get("mediaItems")):
        media_id = item.get("mediaId")
        if media_id is not None and str(media_id) in media_urls:
            return media_urls[str(media_id)]
    return None


def _parse_entity(raw: UnknownRecord, media_urls: dict[str, str]) -> ContentEntity | None:
    entity_type = _as_str(raw.get("type"))
    if entity_type not in ENTITY_TYPES:
        log.debug("Ignoring entity of unsupported type %r", entity_type)
        return None
    data: dict[str, Any] = dict(_as_record(raw.get("data")) or {})
    if entity_type == "MEDIA" and media_urls:
        image_url = _resolve_media_url(data, media_urls)
        if image_url:
            data["imageUrl"] = image_url
    return ContentEntity(type=entity_type, data=data)  # type: ignore[arg-type]


def _parse_entity_map(
    raw_map: object, media_urls: dict[str, str],
) -> dict[str, ContentEntity]:
    entity_map: dict[str, ContentEntity] = {}
    if isinstance(raw_map, list):
        for entry in _as_records(raw_map):
            key = entry.get("key")
            value = _as_record(entry.get("value"))
            if not (isinstance(key, str) or _is_int(key)) or value is None:
                log.debug("Dropping malformed entity map entry: %r", entry)
                continue
            entity = _parse_entity(value, media_urls)
            if entity is not None:
                entity_map[str(key)] = entity
        return entity_map

    for key, value in (_as_record(raw_map) or {}).items():
        record = _as_record(value)
        if record is None:
            continue
        entity = _parse_entity(record, media_urls)
        if entity is not None:
            entity_map[str(key)] = entity
    return entity_map


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_content_state(
    content_state: object,
    media_entities: list[UnknownRecord] | None = None,
) -> tuple[list[ContentBlock], dict[str, ContentEntity]] | None:
    """Parse a raw content state (dict or JSON string) into blocks and entities.

    Returns:
        ``(blocks, entity_map)``, or None when the payload holds no blocks.
    """
    state = _as_record(content_state)
    if state is None:
        state = _as_record(parse_maybe_json(content_state))
    if state is None:
        return None

    raw_blocks = _as_records(state.get("blocks"))
    if not raw_blocks:
        return None

    blocks = [_parse_block(raw) for raw in raw_blocks]
    entity_map = _parse_entity_map(state.get("entityMap"), _media_url_map(media_entities))
    return blocks, entity_map


def text_from_content_blocks(blocks: list[ContentBlock]) -> str:
    """Flatten blocks to plain text for search, previews, and reading time.

    List items become bullet (U+2022) / ``1. `` lines; a blank line follows each
    header and closes each list run.  Atomic and empty blocks are skipped.
    """
    chunks: list[str] = []
    in_list = False
    for block in blocks:
        text = compact_text(block.text)
        if block.type == "atomic" or not text:
            continue
        if block.type == "unordered-list-item":
            chunks.append(f"\u2022 {text}")
            in_list = True
            continue
        if block.type == "ordered-list-item":
            chunks.append(f"1. {text}")
            in_list = True
            continue
        if in_list:
            chunks.append("")
            in_list = False
        chunks.append(text)
        if block.type.startswith("header-"):
            chunks.append("")
    return re.sub(r"\n{3,}", "\n\n", "\n".join(chunks)).strip()
