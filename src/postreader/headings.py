"""Heading detection for unstructured plain text.

A line is heading-like when it is short, does not end in sentence or clause
punctuation, and the line after it is longer.  Pattern matching only; the
last line is never a heading since it has no follower to compare against.
"""
from __future__ import annotations

from dataclasses import dataclass

from postreader.config import DEFAULT_THRESHOLDS, ReflowThresholds
from postreader.content_types import DetectedHeading

_CLAUSE_END_CHARS = frozenset(".!?,;:")


@dataclass(frozen=True, slots=True)
class HeadingChunk:
    """A detected heading (or None for leading text) and the body under it."""

    heading: DetectedHeading | None
    body: str


def content_lines(text: str) -> list[str]:
    """Split on newlines, trim, and drop empty lines."""
    return [line for line in (raw.strip() for raw in text.split("\n")) if line]


def detect_headings(
    text: str, thresholds: ReflowThresholds = DEFAULT_THRESHOLDS,
) -> list[DetectedHeading]:
    lines = content_lines(text)
    headings: list[DetectedHeading] = []
    for i in range(len(lines) - 1):
        line = lines[i]
        if not thresholds.min_heading_chars < len(line) < thresholds.max_heading_chars:
            continue
        if line[-1] in _CLAUSE_END_CHARS:
            continue
        if len(lines[i + 1]) > len(line):
            headings.append(DetectedHeading(line_index=i, text=line))
    return headings


def split_heading_chunks(
    text: str, headings: list[DetectedHeading],
) -> list[HeadingChunk]:
    """Cut the content lines of *text* at each detected heading.

    Leading lines before the first heading form a chunk with no heading.
    A heading with no lines under it still yields a chunk (empty body).
    """
    lines = content_lines(text)
    by_index = {h.line_index: h for h in headings}

    chunks: list[HeadingChunk] = []
    current_heading: DetectedHeading | None = None
    current_lines: list[str] = []
    for i, line in enumerate(lines):
        heading = by_index.get(i)
        if heading is None:
            current_lines.append(line)
            continue
        if current_lines or current_heading is not None:
            chunks.append(HeadingChunk(current_heading, "\n".join(current_lines)))
        current_heading = heading
        current_lines = []

    if current_lines or current_heading is not None:
        chunks.append(HeadingChunk(current_heading, "\n".join(current_lines)))
    return chunks
