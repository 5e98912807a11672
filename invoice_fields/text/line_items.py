"""
Line Item Parser Module.

Recognizes item rows by shape rather than by column position, since OCR
destroys column alignment: a row is any line whose last two tokens are
numeric (unit price, line total). A bare integer at the start of the row, or
just before the unit price, is the quantity.

Address lines are excluded with a keyword denylist. This is a heuristic and
accepts occasional false positives and negatives.

Author: ML Engineering Team
"""

import re
from typing import Iterable, List, Optional, Sequence

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.postprocessor.normalizers import AmountNormalizer
from invoice_fields.models.invoice_record import LineItem

# Initialize module logger
logger = get_logger(__name__)

BARE_INTEGER = re.compile(r'^\d+$')

DEFAULT_ADDRESS_KEYWORDS = [
    'Street', 'St', 'Avenue', 'Ave', 'Road', 'Rd', 'Lane', 'Ln',
    'Boulevard', 'Blvd', 'Drive', 'Court', 'Square', 'Suite',
]


class LineItemParser:
    """
    Extracts item rows from classified invoice lines.

    Attributes:
        address_keywords: Lowercased tokens that disqualify a line
        amount_normalizer: Repairs unit price and line total

    Example:
        >>> parser = LineItemParser()
        >>> parser.parse_line("Front and rear brake cables 1 100.00 100.00")
        LineItem(description='Front and rear brake cables', quantity='1',
                 unit_price='100.00', line_total='100.00')
    """

    def __init__(
        self,
        address_keywords: Optional[Iterable[str]] = None,
        amount_normalizer: Optional[AmountNormalizer] = None
    ) -> None:
        """
        Initialize the parser.

        Args:
            address_keywords: Denylist of address tokens. If None, uses
                configuration.
            amount_normalizer: Shared normalizer instance.
        """
        if address_keywords is None:
            address_keywords = get_config(
                "extraction.address_keywords",
                DEFAULT_ADDRESS_KEYWORDS
            )

        self.address_keywords = {str(k).lower() for k in address_keywords}
        self.amount_normalizer = amount_normalizer or AmountNormalizer()

        logger.debug(f"LineItemParser initialized ({len(self.address_keywords)} address keywords)")

    def parse(self, lines: Sequence[str]) -> List[LineItem]:
        """
        Scan lines for item rows.

        Args:
            lines: Trimmed lines in source order.

        Returns:
            Items in source order.
        """
        items = []
        for line in lines:
            item = self.parse_line(line)
            if item is not None:
                items.append(item)

        logger.debug(f"Found {len(items)} line items in {len(lines)} lines")
        return items

    def parse_line(self, line: str) -> Optional[LineItem]:
        """
        Parse a single line, returning None when it is not an item row.
        """
        if not line or self.is_address_line(line):
            return None

        tokens = line.split()
        if len(tokens) < 3:
            return None

        numeric = self.amount_normalizer.is_numeric_token
        if not (numeric(tokens[-1]) and numeric(tokens[-2])):
            return None

        quantity = None
        if BARE_INTEGER.match(tokens[0]):
            quantity = tokens.pop(0)

        line_total = tokens.pop()
        unit_price = tokens.pop()

        # "Brake cables 1 100.00 100.00": quantity printed after the description
        if quantity is None and len(tokens) > 1 and BARE_INTEGER.match(tokens[-1]):
            quantity = tokens.pop()

        if not tokens:
            return None

        return LineItem(
            description=' '.join(tokens),
            quantity=quantity or "1",
            unit_price=self.amount_normalizer.normalize(unit_price),
            line_total=self.amount_normalizer.normalize(line_total),
        )

    def is_address_line(self, line: str) -> bool:
        """Check whether any token of the line is an address keyword."""
        for token in line.split():
            if token.strip('.,;:').lower() in self.address_keywords:
                return True
        return False
