"""
Line Classifier Module.

Splits raw OCR text into lines and recognizes the structural regions of an
invoice: the BILL TO and SHIP TO blocks, header scalars (vendor, invoice
number, dates) and the totals footer.

Every extractor is an explicit rule evaluated once per document:
    - SectionRule: start anchor + stop-set, first line is the name, the
      rest is the address; an item row also ends the section
    - ScalarRule: ordered patterns, first matching line wins
    - footer: subtotal (line-anchored), tax (percentage first, literal
      second), total (whole text, last match wins)

All anchors are case-insensitive.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Pattern, Sequence, Tuple

from config import get_config
from invoice_fields.utils.helpers import compile_patterns
from invoice_fields.utils.logger import get_logger
from invoice_fields.postprocessor.normalizers import AmountNormalizer
from invoice_fields.text.line_items import LineItemParser

# Initialize module logger
logger = get_logger(__name__)

_FLAGS = re.IGNORECASE

# Section start anchors (whole line)
BILL_TO = re.compile(r'^BILL\s+TO\s*:?$', _FLAGS)
SHIP_TO = re.compile(r'^SHIP\s+TO\s*:?$', _FLAGS)

# Section stop anchors
STOP_BILL_TO = re.compile(r'^BILL\s+TO\b', _FLAGS)
STOP_SHIP_TO = re.compile(r'^SHIP\s+TO\b', _FLAGS)
STOP_INVOICE_DATE = re.compile(r'\bINVOICE\s+DATE\b', _FLAGS)
STOP_DUE_DATE = re.compile(r'\bDUE\s+DATE\b', _FLAGS)
STOP_SUBTOTAL = re.compile(r'^SUB\s*TOTAL\b', _FLAGS)
STOP_TAX = re.compile(r'^(?:SALES\s+)?TAX\b', _FLAGS)
STOP_TOTAL = re.compile(r'^TOTAL\b', _FLAGS)

# Header scalars
INVOICE_NUMBER = re.compile(
    r'\bINVOICE\s*(?:#|NO\b\.?|NUMBER\b)\s*:?\s*([A-Z0-9][A-Z0-9\-/]*)', _FLAGS
)
INVOICE_DATE = re.compile(r'\bINVOICE\s+DATE\s*:?\s*(\d{1,2}/\d{1,2}/\d{4})\b', _FLAGS)
DUE_DATE = re.compile(r'\bDUE\s+DATE\s*:?\s*(\d{1,2}/\d{1,2}/\d{4})\b', _FLAGS)

# Footer amounts
SUBTOTAL = re.compile(r'^SUB\s*TOTAL\s*:?\s*[$€£]?\s*(\d[\d.,]*)', _FLAGS)
TAX_PERCENT = re.compile(r'^SALES\s+TAX\s*:?\s*(\d+(?:[.,]\d+)?)\s*%', _FLAGS)
TAX_LITERAL = re.compile(r'^(?:SALES\s+)?TAX\s*:?\s*[$€£]?\s*(\d[\d.,]*)(?=\s|$)', _FLAGS)
TOTAL = re.compile(r'TOTAL[ \t]*:?[ \t]*[$€£]?[ \t]*(\d[\d.,]*)', _FLAGS)

DEFAULT_VENDOR_PATTERNS = [r'^(East Repair Inc\.?)[,;:]?$']


def split_lines(text: Optional[str]) -> List[str]:
    """
    Split raw text into trimmed, non-empty lines.

    Example:
        >>> split_lines("  BILL TO \\n\\n John Smith")
        ['BILL TO', 'John Smith']
    """
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def _clean_amount(token: str) -> str:
    return token.rstrip('.,')


@dataclass(frozen=True)
class SectionRule:
    """
    A named block that starts at an anchor line and runs until a stop line.

    Attributes:
        name: Section name
        start: Anchor that opens the section (first matching line)
        stops: Anchors that close it
        is_item_row: Predicate for item rows; the first one also closes it
    """
    name: str
    start: Pattern
    stops: Tuple[Pattern, ...]
    is_item_row: Optional[Callable[[str], bool]] = None

    def find(self, lines: Sequence[str]) -> Optional[List[str]]:
        """
        Return the body lines of the section, or None if it is absent.
        """
        for i, line in enumerate(lines):
            if self.start.search(line):
                break
        else:
            return None

        body = []
        for line in lines[i + 1:]:
            if any(stop.search(line) for stop in self.stops):
                break
            if self.is_item_row is not None and self.is_item_row(line):
                break
            body.append(line)
        return body


@dataclass(frozen=True)
class ScalarRule:
    """
    A single value found by scanning lines top-to-bottom.

    The first line matching any pattern wins. A pattern's first group is the
    value when it has one, otherwise the whole match.
    """
    name: str
    patterns: Tuple[Pattern, ...]

    def find(self, lines: Sequence[str]) -> Optional[str]:
        for line in lines:
            for pattern in self.patterns:
                match = pattern.search(line)
                if match:
                    value = match.group(1) if pattern.groups else match.group(0)
                    return value.strip() or None
        return None


@dataclass
class Section:
    """
    Body of a recognized section.

    Attributes:
        lines: Lines between the anchor and the stop line
        name: First body line
        address: Remaining body lines joined with ", "
    """
    lines: List[str] = field(default_factory=list)

    @property
    def name(self) -> Optional[str]:
        return self.lines[0] if self.lines else None

    @property
    def address(self) -> Optional[str]:
        return ', '.join(self.lines[1:]) or None


@dataclass
class ClassifiedDocument:
    """
    Result of classifying one document's text.

    Attributes:
        lines: Trimmed non-empty lines in source order
        sections: Section name to body (absent sections are omitted)
        scalars: Scalar name to value (None when not found)
        subtotal: Subtotal amount
        tax: Tax amount
        tax_rate: Tax percentage, when the tax was computed from one
        total: Grand total
    """
    lines: List[str] = field(default_factory=list)
    sections: Dict[str, Section] = field(default_factory=dict)
    scalars: Dict[str, Optional[str]] = field(default_factory=dict)
    subtotal: Optional[str] = None
    tax: Optional[str] = None
    tax_rate: Optional[str] = None
    total: Optional[str] = None

    def section(self, name: str) -> Section:
        """Return a section body, empty when the section was not found."""
        return self.sections.get(name, Section())


class LineClassifier:
    """
    Classifies the lines of raw invoice text.

    Attributes:
        section_rules: Ordered section extractors
        scalar_rules: Ordered scalar extractors
        amount_normalizer: Used for footer amounts and derived tax
        item_parser: Decides which lines are item rows

    Example:
        >>> classifier = LineClassifier()
        >>> doc = classifier.classify(text)
        >>> doc.section("buyer").name
        'John Smith'
        >>> doc.total
        '154.06'
    """

    BUYER = "buyer"
    SHIP_TO = "ship_to"

    def __init__(
        self,
        vendor_patterns: Optional[Sequence[str]] = None,
        amount_normalizer: Optional[AmountNormalizer] = None,
        item_parser: Optional[LineItemParser] = None
    ) -> None:
        """
        Initialize the classifier.

        Args:
            vendor_patterns: Regexes matched against whole lines to find the
                vendor. If None, uses configuration.
            amount_normalizer: Shared normalizer instance.
            item_parser: Shared item parser. Section bodies end at the first
                line it accepts as an item row.
        """
        if vendor_patterns is None:
            vendor_patterns = get_config(
                "extraction.vendor_patterns",
                DEFAULT_VENDOR_PATTERNS
            )

        self.amount_normalizer = amount_normalizer or AmountNormalizer()
        self.item_parser = item_parser or LineItemParser(amount_normalizer=self.amount_normalizer)

        footer_stops = (STOP_INVOICE_DATE, STOP_SUBTOTAL, STOP_TAX, STOP_TOTAL, STOP_DUE_DATE)
        self.section_rules = [
            SectionRule(self.BUYER, BILL_TO, (STOP_SHIP_TO,) + footer_stops, self.is_item_row),
            SectionRule(self.SHIP_TO, SHIP_TO, (STOP_BILL_TO,) + footer_stops, self.is_item_row),
        ]

        self.scalar_rules = [
            ScalarRule(
                "vendor_name",
                tuple(compile_patterns(vendor_patterns, "extraction.vendor_patterns"))
            ),
            ScalarRule("invoice_number", (INVOICE_NUMBER,)),
            ScalarRule("invoice_date", (INVOICE_DATE,)),
            ScalarRule("due_date", (DUE_DATE,)),
        ]

        logger.debug(f"LineClassifier initialized ({len(vendor_patterns)} vendor patterns)")

    def is_item_row(self, line: str) -> bool:
        """Check whether the line parses as an item row."""
        return self.item_parser.parse_line(line) is not None

    def scalar_rule(self, name: str) -> ScalarRule:
        """Return the scalar rule with the given name."""
        for rule in self.scalar_rules:
            if rule.name == name:
                return rule
        raise KeyError(name)

    def classify(self, text: Optional[str]) -> ClassifiedDocument:
        """
        Classify raw text.

        Args:
            text: Recognized text, already repaired.

        Returns:
            ClassifiedDocument with sections, scalars and footer amounts.
        """
        text = text or ''
        lines = split_lines(text)
        document = ClassifiedDocument(lines=lines)

        for rule in self.section_rules:
            body = rule.find(lines)
            if body is not None:
                document.sections[rule.name] = Section(body)
                logger.debug(f"Section '{rule.name}': {len(body)} lines")

        for rule in self.scalar_rules:
            document.scalars[rule.name] = rule.find(lines)

        document.subtotal = self.find_subtotal(lines)
        document.tax, document.tax_rate = self.find_tax(lines, document.subtotal)
        document.total = self.find_total(text)

        return document

    def find_subtotal(self, lines: Sequence[str]) -> Optional[str]:
        """Return the first line-anchored SUBTOTAL amount."""
        for line in lines:
            match = SUBTOTAL.search(line)
            if match:
                return self.amount_normalizer.normalize(_clean_amount(match.group(1)))
        return None

    def find_tax(
        self,
        lines: Sequence[str],
        subtotal: Optional[str]
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Resolve the tax amount.

        A "SALES TAX <pct>%" line combined with a known subtotal wins over any
        literal amount on that line. Otherwise the first line starting with
        TAX or SALES TAX directly followed by an amount is used.

        Returns:
            Tuple of (tax, percentage); percentage is None for literal tax.
        """
        if subtotal:
            for line in lines:
                match = TAX_PERCENT.search(line)
                if match:
                    rate = match.group(1)
                    tax = self.amount_normalizer.compute_tax(subtotal, rate)
                    if tax is not None:
                        logger.debug(f"Tax computed from {rate}% of {subtotal}: {tax}")
                        return tax, rate
                    break

        for line in lines:
            match = TAX_LITERAL.search(line)
            if match:
                return self.amount_normalizer.normalize(_clean_amount(match.group(1))), None

        return None, None

    def find_total(self, text: str) -> Optional[str]:
        """
        Return the amount after the last TOTAL anchor in the whole text.

        Footers often print TOTAL in a subtotal context before the grand
        total, so the last occurrence is taken.
        """
        matches = TOTAL.findall(text or '')
        if not matches:
            return None
        return self.amount_normalizer.normalize(_clean_amount(matches[-1]))
