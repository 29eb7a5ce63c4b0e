"""Data models for Notion content blocks.

A page's content is a strict tree of blocks. Each Block owns its children;
the fetcher realizes the whole tree before rendering starts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

from src.asset_cache.models import AssetReference


@dataclass(eq=False, repr=False)
class Block:
    """One node of a page's content tree.

    Attributes:
        id: Block id
        type: Block type tag (e.g. "paragraph", "image")
        payload: The type-specific object (``obj[obj["type"]]`` in the API)
        has_children: Whether the API reported nested blocks
        children: Realized child blocks, in document order
        raw: Remaining top-level fields of the API object

    Note:
        Equality and repr are not derived from the fields; both would recurse
        through arbitrarily deep trees.
    """
    id: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    has_children: bool = False
    children: List['Block'] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: Dict[str, Any]) -> 'Block':
        """Build a Block (without children) from a full API block object."""
        block_type = obj['type']
        raw = {key: value for key, value in obj.items() if key != block_type}
        return cls(
            id=obj['id'],
            type=block_type,
            payload=dict(obj.get(block_type) or {}),
            has_children=bool(obj.get('has_children')),
            raw=raw,
        )

    def __repr__(self) -> str:
        return (
            f"Block(id={self.id!r}, type={self.type!r}, "
            f"has_children={self.has_children}, children={len(self.children)})"
        )


class AssetBlockType(str, Enum):
    """Block types that carry an asset reference."""
    FILE = "file"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    CALLOUT = "callout"


@dataclass(frozen=True)
class AssetField:
    """How to read and replace the asset reference of one block type.

    Attributes:
        get: Returns the remote file/icon object of a block (or None)
        set: Stores a rewritten file/icon object back on a block
        project_relative: Whether the resolved path is rewritten relative to
            the project root (True) or left relative to the content root
    """
    get: Callable[[Block], Optional[Dict[str, Any]]]
    set: Callable[[Block, Dict[str, Any]], None]
    project_relative: bool


def _get_payload(block: Block) -> Optional[Dict[str, Any]]:
    return block.payload


def _set_payload(block: Block, obj: Dict[str, Any]) -> None:
    # Keep children realized by the fetcher
    block.payload = {**block.payload, **obj}


def _get_icon(block: Block) -> Optional[Dict[str, Any]]:
    return block.payload.get('icon')


def _set_icon(block: Block, obj: Dict[str, Any]) -> None:
    block.payload = {**block.payload, 'icon': obj}


ASSET_FIELDS: Dict[AssetBlockType, AssetField] = {
    AssetBlockType.FILE: AssetField(_get_payload, _set_payload, project_relative=True),
    AssetBlockType.IMAGE: AssetField(_get_payload, _set_payload, project_relative=False),
    AssetBlockType.VIDEO: AssetField(_get_payload, _set_payload, project_relative=True),
    AssetBlockType.AUDIO: AssetField(_get_payload, _set_payload, project_relative=True),
    AssetBlockType.CALLOUT: AssetField(_get_icon, _set_icon, project_relative=False),
}

_unmapped = set(AssetBlockType) - set(ASSET_FIELDS)
if _unmapped:
    raise RuntimeError(f"Asset block types without an asset field: {sorted(_unmapped)}")


def asset_block_type(block: Block) -> Optional[AssetBlockType]:
    """Return the AssetBlockType of a block, or None for other block types."""
    try:
        return AssetBlockType(block.type)
    except ValueError:
        return None


def get_asset_reference(block: Block) -> Optional[AssetReference]:
    """Return the asset reference carried by a block, if any."""
    kind = asset_block_type(block)
    if kind is None:
        return None
    return AssetReference.from_object(ASSET_FIELDS[kind].get(block))


def set_asset_reference(block: Block, ref: AssetReference) -> None:
    """Replace the asset reference of an asset-bearing block."""
    kind = asset_block_type(block)
    if kind is None:
        raise ValueError(f"Block type '{block.type}' does not carry an asset")
    ASSET_FIELDS[kind].set(block, ref.to_object())


def iter_blocks(blocks: List[Block]) -> Iterator[Block]:
    """Walk a realized tree in pre-order without recursion."""
    stack = list(reversed(blocks))
    while stack:
        block = stack.pop()
        yield block
        stack.extend(reversed(block.children))
