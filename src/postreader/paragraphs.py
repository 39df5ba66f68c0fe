"""Paragraph reconstruction for plain text with no explicit formatting.

Decision order (first matching rule wins, in both modes):
    1. Normalize line endings and trim; empty input -> no paragraphs.
    2. Blank-line separators present -> split on them, nothing else.
    3. ``tweet`` mode -> every non-empty line is its own paragraph.
    4. ``article`` mode -> break before bullets, numbered markers, and
       sentence starts, then greedily re-join lines up to a length cutoff.
       A single resulting chunk falls back to sentence grouping for long
       inputs.

The thresholds live in ``ReflowThresholds``; callers go through the
``ReflowStrategy`` protocol so the heuristics can be swapped out.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Protocol

from postreader.config import DEFAULT_THRESHOLDS, ReflowThresholds
from postreader.content_types import DetectedHeading, ReflowMode
from postreader.headings import detect_headings as _detect_headings
from postreader.linkify import linkify_text

_BLANK_LINE_RE = re.compile(r"\n{2,}")
_NEWLINES_RE = re.compile(r"\n+")
# Bullet glyphs: U+2022, U+25CF, and U+25AA with its optional text-style
# variation selector (U+FE0E) consumed as part of the same glyph.
_BULLET_RE = re.compile("\\s*(?:[\u2022\u25cf]|\u25aa\ufe0e?)\\s*")
_NUMBERED_RE = re.compile(r"\s(?=\d+\.\s)")
_SENTENCE_BREAK_RE = re.compile("([.!?])\\s+(?=[A-Z0-9\"\u201c])")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")


class ReflowStrategy(Protocol):
    """Turns unstructured text into paragraphs and heading candidates."""

    def paragraphize(self, text: str, mode: ReflowMode) -> list[str]: ...

    def detect_headings(self, text: str) -> list[DetectedHeading]: ...


def split_sentences(text: str) -> list[str]:
    """Split into runs ending in ``. ! ?`` plus any trailing remainder."""
    matches = _SENTENCE_RE.findall(text)
    if not matches:
        stripped = text.strip()
        return [stripped] if stripped else []
    return [chunk.strip() for chunk in matches if chunk.strip()]


def _accumulate(chunks: Iterable[str], limit: int) -> list[str]:
    """Greedily join chunks with spaces, flushing before *limit* is exceeded."""
    grouped: list[str] = []
    current = ""
    for chunk in chunks:
        candidate = f"{current} {chunk}" if current else chunk
        if len(candidate) > limit:
            if current:
                grouped.append(current)
            current = chunk
            continue
        current = candidate
    if current:
        grouped.append(current)
    return grouped


def _nonempty_lines(text: str) -> list[str]:
    return [line for line in (s.strip() for s in _NEWLINES_RE.split(text)) if line]


class HeuristicReflow:
    """Regex/length heuristics tuned for social-media posts."""

    def __init__(self, thresholds: ReflowThresholds = DEFAULT_THRESHOLDS) -> None:
        self.thresholds = thresholds

    def detect_headings(self, text: str) -> list[DetectedHeading]:
        return _detect_headings(text, self.thresholds)

    def paragraphize(self, text: str, mode: ReflowMode) -> list[str]:
        source = text.replace("\r\n", "\n").replace("\r", "\n").strip()
        if not source:
            return []

        if _BLANK_LINE_RE.search(source):
            return [p for p in (s.strip() for s in _BLANK_LINE_RE.split(source)) if p]

        if mode == "tweet":
            return _nonempty_lines(source) or [source]

        return self._reflow_article(source)

    def _reflow_article(self, source: str) -> list[str]:
        t = self.thresholds
        prepared = _BULLET_RE.sub("\n\n\u2022 ", source)
        prepared = _NUMBERED_RE.sub("\n", prepared)
        prepared = _SENTENCE_BREAK_RE.sub("\\1\n", prepared)

        grouped = _accumulate(_nonempty_lines(prepared), t.max_paragraph_chars)
        if len(grouped) > 1:
            return grouped

        if len(source) < t.single_paragraph_limit:
            return [source]

        sentences = split_sentences(source)
        if len(sentences) <= 2:
            return [source]
        return _accumulate(sentences, t.max_sentence_group_chars) or [source]


DEFAULT_REFLOW: ReflowStrategy = HeuristicReflow()


def paragraphize(
    text: str, mode: ReflowMode = "article", strategy: ReflowStrategy = DEFAULT_REFLOW,
) -> list[str]:
    return strategy.paragraphize(text, mode)


def paragraph_markup(paragraph: str) -> str:
    """Escaped, linkified paragraph markup with line breaks preserved."""
    return linkify_text(paragraph).replace("\n", "<br />")
