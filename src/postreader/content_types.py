"""Core types for post content rendering.

Input records (``ContentBlock``, ``ContentEntity``) mirror the structured
rich-text payload produced by the ingestion adapter.  Derived records
(``Segment``, block groups, ``DetectedHeading``) are created fresh per render
call and discarded afterwards.  Output records are typed rendering
instructions carrying pre-escaped, pre-linkified inline markup.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal


# ---------------------------------------------------------------------------
# Closed kind sets
# ---------------------------------------------------------------------------

type BlockType = Literal[
    "unstyled",
    "header-one",
    "header-two",
    "header-three",
    "blockquote",
    "code-block",
    "unordered-list-item",
    "ordered-list-item",
    "atomic",
]
type EntityType = Literal["LINK", "MEDIA", "MARKDOWN", "DIVIDER"]
type ReflowMode = Literal["tweet", "article"]
type TocKind = Literal["title", "heading"]

BLOCK_TYPES: frozenset[str] = frozenset({
    "unstyled", "header-one", "header-two", "header-three",
    "blockquote", "code-block",
    "unordered-list-item", "ordered-list-item", "atomic",
})
ENTITY_TYPES: frozenset[str] = frozenset({"LINK", "MEDIA", "MARKDOWN", "DIVIDER"})

HEADER_LEVELS: dict[str, int] = {
    "header-one": 1,
    "header-two": 2,
    "header-three": 3,
}


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InlineStyleRange:
    """Style span over a block's text. ``style`` is matched case-insensitively."""

    offset: int
    length: int
    style: str


@dataclass(frozen=True, slots=True)
class EntityRange:
    """Span of a block's text that references an entity by key."""

    offset: int
    length: int
    key: str


@dataclass(frozen=True, slots=True)
class ContentBlock:
    """One structural unit of a rich document (paragraph, heading, list item...)."""

    type: BlockType = "unstyled"
    text: str = ""
    inline_style_ranges: tuple[InlineStyleRange, ...] = ()
    entity_ranges: tuple[EntityRange, ...] = ()
    depth: int = 0


@dataclass(frozen=True, slots=True)
class ContentEntity:
    """Out-of-line annotation referenced by ``EntityRange.key``.

    ``data`` is type-specific: LINK -> ``url``, MEDIA -> ``imageUrl``,
    MARKDOWN -> ``markdown``.  DIVIDER carries no data.
    """

    type: EntityType
    data: Mapping[str, Any] = field(default_factory=dict)


type EntityMap = Mapping[str, ContentEntity]


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Segment:
    """Maximal run of characters sharing ``(bold, italic, entity_key)``."""

    text: str
    bold: bool = False
    italic: bool = False
    entity_key: str | None = None


@dataclass(frozen=True, slots=True)
class ListGroup:
    """Contiguous run of list items of one list kind."""

    ordered: bool
    items: tuple[ContentBlock, ...]

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("list group must contain at least one item")

    @property
    def kind(self) -> str:
        return "ordered-list" if self.ordered else "unordered-list"


@dataclass(frozen=True, slots=True)
class SingleGroup:
    """Any non-list block, rendered on its own."""

    block: ContentBlock

    @property
    def kind(self) -> str:
        return "single"


type BlockGroup = ListGroup | SingleGroup


@dataclass(frozen=True, slots=True)
class DetectedHeading:
    """Heading-like line found in unstructured text."""

    line_index: int   # index into the trimmed non-empty line array
    text: str


# ---------------------------------------------------------------------------
# Output instructions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Paragraph:
    markup: str
    anchor_id: str = ""


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    markup: str
    anchor_id: str = ""

    def __post_init__(self) -> None:
        if not 1 <= self.level <= 3:
            raise ValueError(f"heading level must be in 1..3, got {self.level}")


@dataclass(frozen=True, slots=True)
class ListBlock:
    ordered: bool
    items: tuple[str, ...]
    anchor_id: str = ""


@dataclass(frozen=True, slots=True)
class Image:
    url: str
    alt: str = ""
    anchor_id: str = ""


@dataclass(frozen=True, slots=True)
class CodeBlock:
    """Preformatted code. ``code`` is escaped markup, never raw source text."""

    code: str
    language: str = ""
    anchor_id: str = ""


@dataclass(frozen=True, slots=True)
class Divider:
    anchor_id: str = ""


@dataclass(frozen=True, slots=True)
class Blockquote:
    markup: str
    anchor_id: str = ""


@dataclass(frozen=True, slots=True)
class Spacer:
    """Vertical gap standing in for a blank source block."""

    anchor_id: str = ""


type Instruction = (
    Paragraph | Heading | ListBlock | Image | CodeBlock | Divider | Blockquote | Spacer
)


# ---------------------------------------------------------------------------
# Article envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Article:
    """Long-form post content: structured blocks and/or plain text."""

    plain_text: str = ""
    title: str = ""
    cover_image_url: str = ""
    content_blocks: tuple[ContentBlock, ...] = ()
    entity_map: Mapping[str, ContentEntity] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TocSection:
    """Navigation entry pointing at an emitted anchor id."""

    id: str
    label: str
    kind: TocKind


@dataclass(frozen=True, slots=True)
class RenderedArticle:
    title: str
    title_anchor_id: str
    cover_image_url: str
    blocks: tuple[Instruction, ...]
    toc: tuple[TocSection, ...]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def instruction_to_dict(instruction: Instruction) -> dict[str, object]:
    """Serialize one instruction with a ``kind`` discriminator."""

    match instruction:
        case Paragraph(markup=markup, anchor_id=anchor_id):
            return {"kind": "paragraph", "markup": markup, "anchor_id": anchor_id}
        case Heading(level=level, markup=markup, anchor_id=anchor_id):
            return {
                "kind": "heading",
                "level": level,
                "markup": markup,
                "anchor_id": anchor_id,
            }
        case ListBlock(ordered=ordered, items=items, anchor_id=anchor_id):
            return {
                "kind": "list",
                "ordered": ordered,
                "items": list(items),
                "anchor_id": anchor_id,
            }
        case Image(url=url, alt=alt, anchor_id=anchor_id):
            return {"kind": "image", "url": url, "alt": alt, "anchor_id": anchor_id}
        case CodeBlock(code=code, language=language, anchor_id=anchor_id):
            return {
                "kind": "code",
                "code": code,
                "language": language,
                "anchor_id": anchor_id,
            }
        case Divider(anchor_id=anchor_id):
            return {"kind": "divider", "anchor_id": anchor_id}
        case Blockquote(markup=markup, anchor_id=anchor_id):
            return {"kind": "blockquote", "markup": markup, "anchor_id": anchor_id}
        case Spacer(anchor_id=anchor_id):
            return {"kind": "spacer", "anchor_id": anchor_id}
    raise TypeError(f"not a rendering instruction: {instruction!r}")


def document_to_dict(rendered: RenderedArticle) -> dict[str, object]:
    """Serialize a rendered article for deterministic snapshots."""

    return {
        "title": rendered.title,
        "title_anchor_id": rendered.title_anchor_id,
        "cover_image_url": rendered.cover_image_url,
        "blocks": [instruction_to_dict(b) for b in rendered.blocks],
        "toc": [
            {"id": s.id, "label": s.label, "kind": s.kind}
            for s in rendered.toc
        ],
    }


def blocks_to_dicts(instructions: Sequence[Instruction]) -> list[dict[str, object]]:
    return [instruction_to_dict(i) for i in instructions]
