"""Markup escaping, URL filtering, and markup-to-text helpers.

Two directions:
- ``escape_html`` / ``sanitize_url``: make remote text and URLs safe to
  embed in emitted inline markup.
- ``strip_markup``: recover display text from emitted markup (navigation
  labels, previews).

Plus small text normalizers shared by the reflow heuristics and the
ingestion adapter.
"""
from __future__ import annotations

import re

from bs4 import BeautifulSoup

# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

# Only the four characters that can open a tag or close an attribute.  Single
# quotes are left alone: an entity such as ``&#x27;`` would expose a ``#``
# that the hashtag linkifier then picks up.
_ESCAPES: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
}
_ESCAPE_RE = re.compile(r'[&<>"]')


def escape_html(text: str) -> str:
    """Escape ``& < > "`` for safe embedding in element content or attributes."""
    if not text:
        return ""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], text)


# ---------------------------------------------------------------------------
# URL filtering
# ---------------------------------------------------------------------------

_SAFE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def sanitize_url(url: object) -> str:
    """Return *url* if it is an absolute http(s) URL, else empty string.

    Any other scheme (``javascript:``, ``data:``, relative paths) is dropped.
    Non-string input is treated as absent.
    """
    if not isinstance(url, str):
        return ""
    url = url.strip()
    if _SAFE_URL_RE.match(url):
        return url
    return ""


# ---------------------------------------------------------------------------
# Markup -> text
# ---------------------------------------------------------------------------


def strip_markup(markup: str) -> str:
    """Extract display text from inline markup, collapsing whitespace.

    ``<br />`` becomes a space; entities are decoded.
    """
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with(" ")
    text = soup.get_text()
    return normalize_text(strip_zero_width(text))


# ---------------------------------------------------------------------------
# Text normalizers
# ---------------------------------------------------------------------------

# U+200B (ZWSP), U+200C (ZWNJ), U+FEFF (BOM)
_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\ufeff]")


def strip_zero_width(text: str) -> str:
    """Remove zero-width Unicode characters."""
    return _ZERO_WIDTH_RE.sub("", text)


def normalize_text(value: str) -> str:
    """Collapse all whitespace runs to single spaces and trim."""
    return re.sub(r"\s+", " ", value).strip()


def compact_text(value: str) -> str:
    """Collapse horizontal whitespace (preserving newlines) and limit blanks."""
    value = re.sub(r"[^\S\n]+", " ", value)
    value = re.sub(r"\n{3,}", "\n\n", value)
    return value.strip()


def truncate_label(text: str, max_len: int = 48) -> str:
    """Single-line label of at most *max_len* chars, ellipsized when cut."""
    clean = normalize_text(text)
    if len(clean) <= max_len:
        return clean
    return clean[:max_len].rstrip() + "\u2026"
