"""
Main Post-Processor Module.

This module provides the PostProcessor class that finishes every
InvoiceRecord, whichever path produced it.

Operations:
    - Normalize amounts
    - Clean text fields
    - Validate fields and footer arithmetic
    - Log all transformations

Author: ML Engineering Team
"""

from typing import Optional

from invoice_fields.utils.logger import get_logger
from invoice_fields.models.invoice_record import InvoiceRecord
from .normalizers import AmountNormalizer
from .validators import FieldValidator, ValidationResult

# Initialize module logger
logger = get_logger(__name__)


class PostProcessor:
    """
    Post-processor for extracted invoice records.

    Attributes:
        amount_normalizer: AmountNormalizer instance
        field_validator: FieldValidator instance

    Example:
        >>> processor = PostProcessor()
        >>> cleaned = processor.process(record)
        >>> cleaned.total
        '154.06'
        >>> cleaned.warnings
        []
    """

    AMOUNT_FIELDS = ('subtotal', 'tax', 'total')
    TEXT_FIELDS = (
        'vendor_name',
        'invoice_number',
        'buyer_name',
        'buyer_address',
        'ship_name',
        'ship_address',
    )

    def __init__(
        self,
        amount_normalizer: Optional[AmountNormalizer] = None,
        field_validator: Optional[FieldValidator] = None
    ) -> None:
        """Initialize the post-processor with all sub-components."""
        self.amount_normalizer = amount_normalizer or AmountNormalizer()
        self.field_validator = field_validator or FieldValidator()

        logger.debug("PostProcessor initialized")

    def process(self, record: InvoiceRecord) -> InvoiceRecord:
        """
        Normalize, clean and validate a record.

        The input record is left untouched; validation findings are attached
        to the returned copy as warnings.

        Args:
            record: Record produced by either extraction path.

        Returns:
            Processed copy of the record.
        """
        processed = record.copy()

        self._normalize_amounts(processed)
        self._clean_text_fields(processed)

        validation = self.field_validator.validate_record(processed)
        for message in validation.errors + validation.warnings:
            processed.add_warning(message)

        self._log_processing_summary(record, processed, validation)

        return processed

    def _normalize_amounts(self, record: InvoiceRecord) -> None:
        for field_name in self.AMOUNT_FIELDS:
            original = getattr(record, field_name)
            if not original:
                continue

            normalized = self.amount_normalizer.extract_amount(original)
            if normalized:
                setattr(record, field_name, normalized)
                if normalized != original:
                    logger.debug(f"Normalized {field_name}: '{original}' -> '{normalized}'")
            else:
                setattr(record, field_name, None)
                record.add_warning(f"Could not normalize {field_name}: '{original}'")

        for item in record.line_items:
            item.unit_price = self.amount_normalizer.normalize(item.unit_price)
            item.line_total = self.amount_normalizer.normalize(item.line_total)

    def _clean_text_fields(self, record: InvoiceRecord) -> None:
        for field_name in self.TEXT_FIELDS:
            value = getattr(record, field_name)
            if value:
                record.set_field(field_name, self._clean_text(value))

        for item in record.line_items:
            item.description = self._clean_text(item.description)

    def _clean_text(self, text: str) -> str:
        """
        Collapse whitespace and strip separator punctuation at the ends.

        Periods are kept ("Inc.").
        """
        text = ' '.join(text.split())
        return text.strip(',;: ')

    def _log_processing_summary(
        self,
        original: InvoiceRecord,
        processed: InvoiceRecord,
        validation: ValidationResult
    ) -> None:
        changes = [
            name for name in self.AMOUNT_FIELDS
            if getattr(original, name) != getattr(processed, name)
        ]

        logger.info(
            f"Post-processing complete: "
            f"{len(changes)} normalizations, "
            f"{len(validation.errors)} errors, "
            f"{len(validation.warnings)} warnings"
        )

        for error in validation.errors:
            logger.warning(f"Validation error: {error}")

        for warning in validation.warnings[:5]:
            logger.debug(f"Validation warning: {warning}")
