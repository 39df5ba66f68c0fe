"""Group consecutive list-item blocks into list groups.

Single linear pass.  A list group only ever extends the immediately
preceding group of the same list kind; any other block starts a new group.
"""
from __future__ import annotations

from collections.abc import Iterable

from postreader.content_types import BlockGroup, ContentBlock, ListGroup, SingleGroup

_LIST_KINDS: dict[str, bool] = {
    "unordered-list-item": False,
    "ordered-list-item": True,
}


def group_blocks(blocks: Iterable[ContentBlock]) -> list[BlockGroup]:
    groups: list[BlockGroup] = []
    pending: list[ContentBlock] = []
    pending_ordered = False

    def _flush() -> None:
        if pending:
            groups.append(ListGroup(ordered=pending_ordered, items=tuple(pending)))
            pending.clear()

    for block in blocks:
        ordered = _LIST_KINDS.get(block.type)
        if ordered is None:
            _flush()
            groups.append(SingleGroup(block=block))
            continue
        if pending and ordered != pending_ordered:
            _flush()
        pending_ordered = ordered
        pending.append(block)

    _flush()
    return groups
