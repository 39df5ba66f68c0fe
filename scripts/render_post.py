#!/usr/bin/env python3
"""Render a saved post payload to reading-view instructions.

Accepts structured content (``contentBlocks`` + ``entityMap``), a raw
platform ``content_state``, or plain text (``plainText`` / ``text``), and
prints the rendered article (title, cover image, instruction blocks, table of
contents) as JSON.

Usage:
    # Render one payload
    python3 scripts/render_post.py post.json

    # Plain-text tweet body
    python3 scripts/render_post.py tweet.json --mode tweet

    # One payload per line, one rendered document per output line
    python3 scripts/render_post.py posts.jsonl --jsonl --thresholds reflow.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

from postreader.assembler import build_toc, render_article, render_plain_text
from postreader.config import load_thresholds
from postreader.content_state import parse_content_state
from postreader.content_types import (
    Article,
    RenderedArticle,
    ReflowMode,
    document_to_dict,
)
from postreader.io_utils import dumps_json, load_json, load_jsonl
from postreader.paragraphs import DEFAULT_REFLOW, HeuristicReflow, ReflowStrategy

log = logging.getLogger("render_post")

TWEET_ANCHOR_PREFIX = "section-tweet"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a saved post payload to reading-view instructions."
    )
    parser.add_argument("input", type=Path, help="Payload JSON (or JSONL with --jsonl)")
    parser.add_argument(
        "--mode",
        choices=["tweet", "article"],
        default="article",
        help="Reflow mode for plain-text payloads (default: article).",
    )
    parser.add_argument(
        "--jsonl",
        action="store_true",
        help="Input holds one payload per line; emit one compact document per line.",
    )
    parser.add_argument(
        "--thresholds",
        type=Path,
        default=None,
        help="JSON file overriding the reflow thresholds.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    return parser


def _str_field(payload: dict[str, Any], *names: str) -> str:
    for name in names:
        value = payload.get(name)
        if isinstance(value, str) and value:
            return value
    return ""


def render_payload(
    payload: object,
    mode: ReflowMode = "article",
    strategy: ReflowStrategy = DEFAULT_REFLOW,
) -> dict[str, object]:
    """Render one payload dict to its serialized document."""
    if not isinstance(payload, dict):
        log.debug("Payload is not an object; rendering empty document")
        payload = {}

    title = _str_field(payload, "title")
    cover = _str_field(payload, "coverImageUrl")
    avatar = _str_field(payload, "authorAvatarUrl")
    plain_text = _str_field(payload, "plainText", "text")

    parsed = parse_content_state(
        payload.get("content_state") or {
            "blocks": payload.get("contentBlocks"),
            "entityMap": payload.get("entityMap"),
        },
        payload.get("mediaEntities"),
    )
    blocks, entity_map = parsed if parsed is not None else ([], {})

    if mode == "tweet" and not blocks:
        instructions = render_plain_text(
            plain_text, "tweet", anchor_prefix=TWEET_ANCHOR_PREFIX, strategy=strategy,
        )
        rendered = RenderedArticle(
            title="",
            title_anchor_id="",
            cover_image_url="",
            blocks=tuple(instructions),
            toc=tuple(build_toc(instructions)),
        )
        return document_to_dict(rendered)

    article = Article(
        plain_text=plain_text,
        title=title,
        cover_image_url=cover,
        content_blocks=tuple(blocks),
        entity_map=entity_map,
    )
    return document_to_dict(render_article(article, author_avatar_url=avatar, strategy=strategy))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.input.exists():
        print(f"Error: input not found: {args.input}", file=sys.stderr)
        return 1

    strategy: ReflowStrategy = DEFAULT_REFLOW
    if args.thresholds is not None:
        try:
            strategy = HeuristicReflow(load_thresholds(args.thresholds))
        except (OSError, ValueError) as exc:
            print(f"Error: bad thresholds file {args.thresholds}: {exc}", file=sys.stderr)
            return 1

    try:
        payloads = load_jsonl(args.input) if args.jsonl else [load_json(args.input)]
    except orjson.JSONDecodeError as exc:
        print(f"Error: invalid JSON in {args.input}: {exc}", file=sys.stderr)
        return 1

    log.info("Rendering %d payload(s) from %s", len(payloads), args.input)
    out = sys.stdout.buffer
    for payload in payloads:
        document = render_payload(payload, args.mode, strategy)
        out.write(dumps_json(document, pretty=not args.jsonl))
        out.write(b"\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
