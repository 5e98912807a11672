"""
Key/Value Mapper Module.

Maps the form labels found by the graph path onto InvoiceRecord fields.
Labels are compared case-insensitively, with whitespace collapsed and a
trailing colon ignored. A label ending in a percentage ("6.25%",
"Sales Tax 6.25%") carries the tax amount.

Fields the form does not provide are filled from the LINE text using the
text-path classifier, so both paths share one vocabulary.

Author: ML Engineering Team
"""

import re
from typing import Dict, Optional, Sequence

from invoice_fields.utils.logger import get_logger
from invoice_fields.models.invoice_record import InvoiceRecord
from invoice_fields.text.classifier import ClassifiedDocument, LineClassifier
from invoice_fields.text.line_items import LineItemParser

# Initialize module logger
logger = get_logger(__name__)

FIELD_LABELS = {
    'buyer_name': ('BILL TO',),
    'ship_name': ('SHIP TO',),
    'invoice_number': ('INVOICE #', 'INVOICE NO', 'INVOICE NO.', 'INVOICE NUMBER'),
    'invoice_date': ('INVOICE DATE',),
    'due_date': ('DUE DATE',),
    'subtotal': ('SUBTOTAL', 'SUB TOTAL'),
    'tax': ('TAX', 'SALES TAX'),
    'total': ('TOTAL',),
}

TAX_PERCENT_LABEL = re.compile(r'(?:^|\s)\d+(?:[.,]\d+)?\s*%$')


def normalize_label(label: str) -> str:
    """
    Canonical form of a form label.

    Example:
        >>> normalize_label("  Invoice   Date: ")
        'INVOICE DATE'
    """
    return ' '.join(label.split()).rstrip(':').strip().upper()


class KeyValueMapper:
    """
    Builds an InvoiceRecord from a key/value map and the raw LINE text.

    Example:
        >>> mapper = KeyValueMapper()
        >>> record = mapper.map({"INVOICE #": "US-001", "TOTAL": "$154.06"}, [])
        >>> record.invoice_number, record.total
        ('US-001', '$154.06')
    """

    def __init__(
        self,
        classifier: Optional[LineClassifier] = None,
        item_parser: Optional[LineItemParser] = None
    ) -> None:
        self.item_parser = item_parser or LineItemParser()
        self.classifier = classifier or LineClassifier(item_parser=self.item_parser)

        self._label_to_field: Dict[str, str] = {}
        for field_name, labels in FIELD_LABELS.items():
            for label in labels:
                self._label_to_field[label] = field_name

        self._vendor_rule = self.classifier.scalar_rule("vendor_name")

    def map(self, key_values: Dict[str, str], lines: Sequence[str]) -> InvoiceRecord:
        """
        Map form pairs to record fields.

        Amounts are copied as printed; normalization is left to the
        PostProcessor.

        Args:
            key_values: Output of GraphKeyValueExtractor.extract.
            lines: Output of GraphKeyValueExtractor.extract_lines.

        Returns:
            Unprocessed InvoiceRecord.
        """
        record = InvoiceRecord()

        for label, value in key_values.items():
            # The seller's name is printed as a label over its address
            if record.vendor_name is None:
                vendor = self._vendor_rule.find([label])
                if vendor:
                    record.vendor_name = vendor
                    continue

            field_name = self._field_for(label)
            if field_name is None or not value:
                continue

            if getattr(record, field_name) is None:
                record.set_field(field_name, value)
                logger.debug(f"Mapped '{label}' -> {field_name}")

        text = self.classifier.amount_normalizer.repair_text('\n'.join(lines))
        document = self.classifier.classify(text)
        self._fill_from_lines(record, document)
        record.line_items = self.item_parser.parse(document.lines)

        return record

    def _field_for(self, label: str) -> Optional[str]:
        canonical = normalize_label(label)
        field_name = self._label_to_field.get(canonical)
        if field_name is None and TAX_PERCENT_LABEL.search(canonical):
            field_name = 'tax'
        return field_name

    def _fill_from_lines(self, record: InvoiceRecord, document: ClassifiedDocument) -> None:
        filled = []

        for field_name, value in document.scalars.items():
            if value and getattr(record, field_name) is None:
                record.set_field(field_name, value)
                filled.append(field_name)

        # Name and address come from the same block, so they move together
        for section_name, name_field, address_field in (
            (LineClassifier.BUYER, 'buyer_name', 'buyer_address'),
            (LineClassifier.SHIP_TO, 'ship_name', 'ship_address'),
        ):
            section = document.section(section_name)
            if not section.name:
                continue
            if getattr(record, name_field) is None:
                record.set_field(name_field, section.name)
                record.set_field(address_field, section.address)
                filled.append(name_field)
            elif getattr(record, address_field) is None and section.address:
                record.set_field(address_field, section.address)
                filled.append(address_field)

        for field_name in ('subtotal', 'tax', 'total'):
            value = getattr(document, field_name)
            if value and getattr(record, field_name) is None:
                record.set_field(field_name, value)
                filled.append(field_name)

        if filled:
            logger.debug(f"Filled from LINE text: {', '.join(filled)}")
