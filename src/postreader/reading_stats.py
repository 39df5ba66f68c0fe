"""Reading-time estimate for a saved post."""
from __future__ import annotations

import math

from postreader.html_utils import normalize_text

POST_WORDS_PER_MINUTE = 180
ARTICLE_WORDS_PER_MINUTE = 200
LONG_FORM_FLOOR_MINUTES = 2


def word_count(text: str) -> int:
    single_line = normalize_text(text)
    return len(single_line.split(" ")) if single_line else 0


def estimate_reading_minutes(
    text: str,
    article_text: str = "",
    quote_text: str = "",
    *,
    is_thread: bool = False,
    has_link: bool = False,
    is_long_text: bool = False,
) -> int:
    """Whole minutes needed to read a post, never less than one.

    Threads, long-text posts, link posts, and articles are floored at two
    minutes since their visible text understates the content behind them.
    """
    estimate = math.ceil(word_count(f"{text} {article_text} {quote_text}") / POST_WORDS_PER_MINUTE)

    if is_thread or is_long_text or has_link:
        estimate = max(estimate, LONG_FORM_FLOOR_MINUTES)
    if article_text.strip():
        estimate = max(
            estimate,
            math.ceil(word_count(article_text) / ARTICLE_WORDS_PER_MINUTE),
            LONG_FORM_FLOOR_MINUTES,
        )
    return max(1, estimate)
