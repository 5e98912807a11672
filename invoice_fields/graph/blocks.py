"""
Document Layout Block Data Classes.

This module defines the data structures for a document-analysis response:
a flat list of blocks (pages, lines, words, form key/value containers)
linked to each other by typed relationships.

Classes:
    Relationship: Typed edge from one block to an ordered list of block ids
    Block: Single node of the layout graph
    BlockIndex: Id-indexed arena used for every graph traversal

The upstream payload is untrusted: ids may repeat, relationships may point at
blocks that do not exist, and fields may carry the wrong types. Parsing never
raises; anything unusable is dropped.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from invoice_fields.utils.logger import get_logger

logger = get_logger(__name__)

# Block types
LINE = "LINE"
KEY_VALUE_SET = "KEY_VALUE_SET"

# Entity roles
KEY = "KEY"
VALUE = "VALUE"

# Relationship types
CHILD = "CHILD"


@dataclass
class Relationship:
    """
    Typed edge from a block to other blocks.

    Attributes:
        type: Edge type (CHILD, VALUE, ...)
        ids: Target block ids, in source order
    """
    type: str
    ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Optional['Relationship']:
        """Build a relationship from a ``{"Type", "Ids"}`` mapping."""
        if not isinstance(data, dict):
            return None

        rel_type = data.get('Type')
        if not isinstance(rel_type, str):
            return None

        ids = data.get('Ids') or []
        if not isinstance(ids, (list, tuple)):
            ids = []

        return cls(type=rel_type, ids=[i for i in ids if isinstance(i, str)])


@dataclass
class Block:
    """
    A node of the document layout graph.

    Attributes:
        id: Unique block id (None makes the block unreachable)
        block_type: LINE, WORD, KEY_VALUE_SET, ...
        text: Recognized text, if the block carries any
        entity_types: Roles of a KEY_VALUE_SET block (KEY or VALUE)
        relationships: Outgoing edges, in source order

    Example:
        >>> block = Block.from_dict({"Id": "1", "BlockType": "WORD", "Text": "TOTAL"})
        >>> block.text
        'TOTAL'
    """
    id: Optional[str]
    block_type: Optional[str] = None
    text: Optional[str] = None
    entity_types: Set[str] = field(default_factory=set)
    relationships: List[Relationship] = field(default_factory=list)

    @property
    def is_key(self) -> bool:
        """Whether this is the KEY side of a form field."""
        return self.block_type == KEY_VALUE_SET and KEY in self.entity_types

    def first_relationship(self, rel_type: str) -> Optional[Relationship]:
        """Return the first relationship of the given type, if any."""
        for relationship in self.relationships:
            if relationship.type == rel_type:
                return relationship
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """
        Build a block from a Textract-style dictionary.

        Args:
            data: Mapping with ``Id``, ``BlockType``, ``Text``,
                ``EntityTypes`` and ``Relationships`` keys, all optional.
        """
        block_id = data.get('Id')
        block_type = data.get('BlockType')
        text = data.get('Text')

        entity_types = data.get('EntityTypes') or []
        if not isinstance(entity_types, (list, tuple, set)):
            entity_types = []

        relationships = data.get('Relationships') or []
        if not isinstance(relationships, (list, tuple)):
            relationships = []

        return cls(
            id=block_id if isinstance(block_id, str) else None,
            block_type=block_type if isinstance(block_type, str) else None,
            text=text if isinstance(text, str) else None,
            entity_types={e for e in entity_types if isinstance(e, str)},
            relationships=[
                rel for rel in (Relationship.from_dict(r) for r in relationships)
                if rel is not None
            ]
        )


def parse_blocks(payload: Any) -> List[Block]:
    """
    Parse a document-analysis payload into blocks.

    Accepts the raw response (``{"Blocks": [...]}``), a bare list of block
    dictionaries, or a list of already-built Block objects. Entries that are
    neither are skipped.

    Args:
        payload: Decoded analysis response.

    Returns:
        Blocks in source order.
    """
    if isinstance(payload, dict):
        payload = payload.get('Blocks') or []

    if not isinstance(payload, (list, tuple)):
        return []

    blocks = []
    skipped = 0
    for entry in payload:
        if isinstance(entry, Block):
            blocks.append(entry)
        elif isinstance(entry, dict):
            blocks.append(Block.from_dict(entry))
        else:
            skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} malformed block entries")

    return blocks


class BlockIndex:
    """
    Id-indexed arena over a block list.

    Every traversal step goes through ``get``, so dangling ids resolve to
    None instead of raising. On duplicate ids the last block wins.

    Example:
        >>> index = BlockIndex(blocks)
        >>> index.text_of(["w1", "w2", "missing"])
        'Front Rear'
    """

    def __init__(self, blocks: Iterable[Block]) -> None:
        self.blocks: List[Block] = list(blocks)
        self._by_id: Dict[str, Block] = {}
        for block in self.blocks:
            if block.id:
                self._by_id[block.id] = block

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __contains__(self, block_id: str) -> bool:
        return block_id in self._by_id

    def get(self, block_id: str) -> Optional[Block]:
        """Return the block with this id, or None if it does not exist."""
        return self._by_id.get(block_id)

    def text_of(self, block_ids: Iterable[str]) -> str:
        """
        Space-join the text of the given blocks.

        Missing blocks and blocks without text are skipped.
        """
        parts = []
        for block_id in block_ids:
            block = self.get(block_id)
            if block is not None and block.text:
                parts.append(block.text)
        return ' '.join(parts).strip()
