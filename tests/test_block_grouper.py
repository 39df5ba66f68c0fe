"""Tests for postreader.block_grouper module."""
import pytest

from postreader.block_grouper import group_blocks
from postreader.content_types import ContentBlock, ListGroup, SingleGroup


def _b(block_type: str, text: str = "x") -> ContentBlock:
    return ContentBlock(type=block_type, text=text)  # type: ignore[arg-type]


class TestGroupBlocks:
    def test_empty(self) -> None:
        assert group_blocks([]) == []

    def test_mixed_list_kinds_split(self) -> None:
        blocks = [
            _b("unordered-list-item", "a"),
            _b("unordered-list-item", "b"),
            _b("ordered-list-item", "c"),
            _b("unordered-list-item", "d"),
        ]
        groups = group_blocks(blocks)
        assert len(groups) == 3
        assert groups[0] == ListGroup(ordered=False, items=(blocks[0], blocks[1]))
        assert groups[1] == ListGroup(ordered=True, items=(blocks[2],))
        assert groups[2] == ListGroup(ordered=False, items=(blocks[3],))

    def test_non_list_block_breaks_list(self) -> None:
        blocks = [
            _b("ordered-list-item"),
            _b("unstyled"),
            _b("ordered-list-item"),
        ]
        groups = group_blocks(blocks)
        assert [g.kind for g in groups] == ["ordered-list", "single", "ordered-list"]

    def test_non_list_blocks_are_singletons(self) -> None:
        blocks = [_b("header-one"), _b("unstyled"), _b("unstyled"), _b("atomic")]
        groups = group_blocks(blocks)
        assert groups == [SingleGroup(block=b) for b in blocks]

    def test_order_preserved(self) -> None:
        blocks = [_b("unordered-list-item", str(i)) for i in range(5)]
        (group,) = group_blocks(blocks)
        assert isinstance(group, ListGroup)
        assert [item.text for item in group.items] == ["0", "1", "2", "3", "4"]

    def test_accepts_iterator(self) -> None:
        groups = group_blocks(iter([_b("unordered-list-item"), _b("unordered-list-item")]))
        assert len(groups) == 1


class TestListGroup:
    def test_empty_items_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least one item"):
            ListGroup(ordered=True, items=())
