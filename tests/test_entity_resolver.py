"""Tests for postreader.entity_resolver module."""
from postreader.content_types import (
    CodeBlock,
    ContentBlock,
    ContentEntity,
    Divider,
    EntityRange,
    Image,
)
from postreader.entity_resolver import resolve_atomic_block, resolve_entity, strip_code_fence


def _atomic(*keys: str) -> ContentBlock:
    return ContentBlock(
        type="atomic",
        text=" ",
        entity_ranges=tuple(EntityRange(offset=0, length=1, key=k) for k in keys),
    )


class TestStripCodeFence:
    def test_fence_with_language(self) -> None:
        assert strip_code_fence("```python\nprint(1)\n```") == ("print(1)", "python")

    def test_fence_without_language(self) -> None:
        assert strip_code_fence("```\ncode\n```") == ("code", "")

    def test_no_fence(self) -> None:
        assert strip_code_fence("just code") == ("just code", "")

    def test_inner_fences_kept(self) -> None:
        code, _ = strip_code_fence("```md\na ``` b\n```")
        assert code == "a ``` b"


class TestResolveEntity:
    def test_media(self) -> None:
        entity = ContentEntity(type="MEDIA", data={"imageUrl": "https://img.example/a.jpg"})
        assert resolve_entity(entity, anchor_id="x") == Image(
            url="https://img.example/a.jpg", alt="", anchor_id="x",
        )

    def test_media_unsafe_url_skipped(self) -> None:
        entity = ContentEntity(type="MEDIA", data={"imageUrl": "javascript:alert(1)"})
        assert resolve_entity(entity) is None

    def test_markdown_escaped(self) -> None:
        entity = ContentEntity(type="MARKDOWN", data={"markdown": '```js\nif (a<b) f("x")\n```'})
        assert resolve_entity(entity) == CodeBlock(
            code="if (a&lt;b) f(&quot;x&quot;)", language="js",
        )

    def test_divider(self) -> None:
        assert resolve_entity(ContentEntity(type="DIVIDER")) == Divider()

    def test_link_has_no_block_form(self) -> None:
        assert resolve_entity(ContentEntity(type="LINK", data={"url": "https://a.com"})) is None

    def test_unknown_type(self) -> None:
        entity = ContentEntity(type="TWEET", data={"id": "1"})  # type: ignore[arg-type]
        assert resolve_entity(entity) is None

    def test_none(self) -> None:
        assert resolve_entity(None) is None


class TestResolveAtomicBlock:
    def test_first_usable_range_wins(self) -> None:
        entity_map = {
            "0": ContentEntity(type="MEDIA", data={"imageUrl": ""}),
            "1": ContentEntity(type="LINK", data={"url": "https://a.com"}),
            "2": ContentEntity(type="DIVIDER"),
            "3": ContentEntity(type="MEDIA", data={"imageUrl": "https://img.example/b.png"}),
        }
        result = resolve_atomic_block(_atomic("0", "1", "2", "3"), entity_map, anchor_id="a")
        assert result == Divider(anchor_id="a")

    def test_missing_entity_skipped(self) -> None:
        entity_map = {"1": ContentEntity(type="MEDIA", data={"imageUrl": "https://i.example/c.png"})}
        result = resolve_atomic_block(_atomic("9", "1"), entity_map)
        assert isinstance(result, Image)
        assert result.url == "https://i.example/c.png"

    def test_empty_markdown_skipped(self) -> None:
        entity_map = {"0": ContentEntity(type="MARKDOWN", data={"markdown": ""})}
        assert resolve_atomic_block(_atomic("0"), entity_map) is None

    def test_no_ranges(self) -> None:
        assert resolve_atomic_block(ContentBlock(type="atomic"), {}) is None
