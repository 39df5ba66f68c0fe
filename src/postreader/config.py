"""Tunable thresholds for the plain-text reflow heuristics.

Values were tuned empirically against saved posts; they are kept in one
frozen record so a reflow strategy can be re-tuned (or replaced) without
touching its callers.  Persisted as JSON.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path

from postreader.io_utils import load_json, save_json


@dataclass(frozen=True, slots=True)
class ReflowThresholds:
    """Character cutoffs used by paragraph and heading reconstruction."""

    max_paragraph_chars: int = 260       # line-accumulation flush point
    single_paragraph_limit: int = 420    # shorter inputs stay one paragraph
    max_sentence_group_chars: int = 290  # sentence-accumulation flush point
    max_heading_chars: int = 80          # exclusive upper bound
    min_heading_chars: int = 2           # exclusive lower bound

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{f.name} must be an int, got {value!r}")
            if value < 0:
                raise ValueError(f"{f.name} must be non-negative, got {value}")
        if self.min_heading_chars >= self.max_heading_chars:
            raise ValueError(
                "min_heading_chars must be < max_heading_chars, got "
                f"{self.min_heading_chars} >= {self.max_heading_chars}",
            )


DEFAULT_THRESHOLDS = ReflowThresholds()


def thresholds_from_dict(d: dict[str, object]) -> ReflowThresholds:
    """Build thresholds from a mapping; missing keys keep their defaults."""
    known = {f.name for f in fields(ReflowThresholds)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ValueError(f"Unknown threshold keys: {', '.join(unknown)}")
    return ReflowThresholds(**d)  # type: ignore[arg-type]


def load_thresholds(path: Path) -> ReflowThresholds:
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Thresholds file must hold a JSON object: {path}")
    return thresholds_from_dict(payload)


def save_thresholds(thresholds: ReflowThresholds, path: Path) -> None:
    save_json(asdict(thresholds), path)
