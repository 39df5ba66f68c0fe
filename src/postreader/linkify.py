"""Inline linkification of raw URLs, @mentions, and #hashtags.

Operates on text that is already escaped and not covered by any entity.
URLs are lifted out first and replaced by placeholder tokens so the mention
and hashtag patterns can never match inside a URL; the tokens are swapped
back for their anchors at the end.
"""
from __future__ import annotations

import re

from postreader.html_utils import escape_html, sanitize_url

PROFILE_BASE_URL = "https://x.com/"
HASHTAG_BASE_URL = "https://x.com/hashtag/"

_URL_RE = re.compile(r"https?://[^\s<]+")
# Placeholder delimiters are private-use code points, absent from real text.
_TOKEN_OPEN = "\ue000"
_TOKEN_CLOSE = "\ue001"
_URL_TOKEN_RE = re.compile(_TOKEN_OPEN + r"(\d+)" + _TOKEN_CLOSE)

# A mention/hashtag must start the string or follow a non-word character,
# which rejects ``email@domain`` and ``abc#tag``.
_MENTION_RE = re.compile(r"(^|[^A-Za-z0-9_])@([A-Za-z0-9_]{1,15})(?=$|[^A-Za-z0-9_])")
_HASHTAG_RE = re.compile(r"(^|[^A-Za-z0-9_])#([A-Za-z0-9_]+)(?=$|[^A-Za-z0-9_])")


def external_link(href: str, inner_markup: str) -> str:
    """Wrap *inner_markup* in an anchor that opens in a new browsing context.

    *href* must already be sanitized and escaped.
    """
    return (
        f'<a href="{href}" target="_blank" rel="noopener noreferrer">'
        f"{inner_markup}</a>"
    )


def linkify_mentions_and_tags(text: str) -> str:
    """Link ``@handle`` to the profile page and ``#tag`` to the tag page."""
    with_mentions = _MENTION_RE.sub(
        lambda m: m.group(1) + external_link(
            PROFILE_BASE_URL + m.group(2), "@" + m.group(2),
        ),
        text,
    )
    return _HASHTAG_RE.sub(
        lambda m: m.group(1) + external_link(
            HASHTAG_BASE_URL + m.group(2), "#" + m.group(2),
        ),
        with_mentions,
    )


def linkify_escaped(escaped: str) -> str:
    """Linkify URLs, mentions, and hashtags in already-escaped text."""
    if not escaped:
        return ""

    url_anchors: list[str] = []

    def _lift_url(match: re.Match[str]) -> str:
        url = match.group(0)
        token = f"{_TOKEN_OPEN}{len(url_anchors)}{_TOKEN_CLOSE}"
        href = sanitize_url(url)
        url_anchors.append(external_link(href, url) if href else url)
        return token

    with_tokens = _URL_RE.sub(_lift_url, escaped)
    with_social = linkify_mentions_and_tags(with_tokens)

    def _restore_url(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < len(url_anchors):
            return url_anchors[index]
        return match.group(0)

    return _URL_TOKEN_RE.sub(_restore_url, with_social)


def linkify_text(text: str) -> str:
    """Escape raw *text* and linkify it."""
    return linkify_escaped(escape_html(text))
