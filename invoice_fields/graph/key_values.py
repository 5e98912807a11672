"""
Graph Key/Value Extractor Module.

Flattens the form section of a document-analysis response into an ordered
``label -> value`` mapping, and collects the raw LINE text alongside it.

Traversal is fixed-depth (key -> children, key -> value -> children), always
through a BlockIndex, so cyclic or dangling relationships cannot recurse or
crash.

Author: ML Engineering Team
"""

from typing import Any, Dict, List

from invoice_fields.utils.logger import get_logger
from .blocks import CHILD, KEY_VALUE_SET, LINE, VALUE, BlockIndex, parse_blocks

logger = get_logger(__name__)


class GraphKeyValueExtractor:
    """
    Extracts form key/value pairs from a layout block graph.

    Only KEY-role KEY_VALUE_SET blocks drive iteration; VALUE-side blocks are
    reached through their key. A key whose label is empty is dropped. When a
    label repeats, the last occurrence wins.

    Example:
        >>> extractor = GraphKeyValueExtractor()
        >>> extractor.extract(response["Blocks"])
        {'INVOICE #': 'US-001', 'TOTAL': '$154.06'}
    """

    def extract(self, payload: Any) -> Dict[str, str]:
        """
        Build the key/value map for a block payload.

        Args:
            payload: Block list, Block objects or a ``{"Blocks": [...]}``
                response. Malformed input yields an empty mapping.

        Returns:
            Mapping of key label to value text in discovery order.
        """
        index = BlockIndex(parse_blocks(payload))
        key_values: Dict[str, str] = {}

        for block in index:
            if not block.is_key or not block.relationships:
                continue

            key_text = self._child_text(index, block)
            if not key_text:
                continue

            value_text = self._value_text(index, block)

            if key_text in key_values:
                logger.debug(f"Key '{key_text}' repeated, keeping last value")
            key_values[key_text] = value_text

        logger.debug(f"Extracted {len(key_values)} key/value pairs from {len(index)} blocks")
        return key_values

    def extract_lines(self, payload: Any) -> List[str]:
        """
        Return the text of every LINE block, in source order.

        Args:
            payload: Same shapes as accepted by ``extract``.
        """
        return [
            block.text for block in parse_blocks(payload)
            if block.block_type == LINE and block.text
        ]

    def _child_text(self, index: BlockIndex, block) -> str:
        relationship = block.first_relationship(CHILD)
        if relationship is None:
            return ''
        return index.text_of(relationship.ids)

    def _value_text(self, index: BlockIndex, key_block) -> str:
        relationship = key_block.first_relationship(VALUE)
        if relationship is None or not relationship.ids:
            return ''

        # Only the first value block is honored per key
        value_block = index.get(relationship.ids[0])
        if value_block is None or value_block.block_type != KEY_VALUE_SET:
            return ''

        return self._child_text(index, value_block)
