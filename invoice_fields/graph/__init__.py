"""
Layout Graph Module.

Consumes the block/relationship graph returned by a document-analysis
service:
    - Block parsing with tolerant field handling
    - Id-indexed traversal (BlockIndex)
    - Form key/value flattening
    - Raw LINE text collection

Author: ML Engineering Team
"""

from .blocks import Block, Relationship, BlockIndex, parse_blocks
from .key_values import GraphKeyValueExtractor

__all__ = [
    'Block',
    'Relationship',
    'BlockIndex',
    'parse_blocks',
    'GraphKeyValueExtractor',
]
