"""
Data Validators Module.

This module provides validation functions for:
    - Amount fields and footer arithmetic
    - Date relationships
    - Required field presence

Validation only reports; it never changes extracted values.

Author: ML Engineering Team
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.models.invoice_record import InvoiceRecord, LineItem
from .normalizers import AmountNormalizer, DateNormalizer

# Initialize module logger
logger = get_logger(__name__)


class DateValidator:
    """
    Validates date fields.

    Example:
        >>> validator = DateValidator()
        >>> validator.is_due_after_invoice("11/02/2019", "26/02/2019")
        (True, 'Valid date relationship')
    """

    def __init__(self, date_normalizer: Optional[DateNormalizer] = None) -> None:
        self.date_normalizer = date_normalizer or DateNormalizer()
        logger.debug("DateValidator initialized")

    def validate(self, date_str: str) -> Tuple[bool, str]:
        """
        Validate a date string with detailed feedback.

        Returns:
            Tuple of (is_valid, message).
        """
        if not date_str:
            return False, "Date is empty"

        if self.date_normalizer.parse(date_str) is None:
            return False, f"Could not parse date: {date_str}"

        return True, "Valid date"

    def is_due_after_invoice(
        self,
        invoice_date: str,
        due_date: str
    ) -> Tuple[bool, str]:
        """
        Check if due date is on or after the invoice date.

        Unparseable dates are not reported here; ``validate`` covers them.

        Returns:
            Tuple of (is_valid, message).
        """
        inv_parsed = self.date_normalizer.parse(invoice_date)
        due_parsed = self.date_normalizer.parse(due_date)

        if inv_parsed is None or due_parsed is None:
            return True, "Could not validate date relationship"

        if due_parsed < inv_parsed:
            return False, "Due date is before invoice date"

        return True, "Valid date relationship"


class AmountValidator:
    """
    Validates amount fields and the arithmetic between them.

    Example:
        >>> validator = AmountValidator()
        >>> validator.check_totals("145.00", "9.06", "154.06")
        (True, 'Totals are consistent')
    """

    def __init__(
        self,
        amount_normalizer: Optional[AmountNormalizer] = None,
        tolerance: Optional[float] = None
    ) -> None:
        self.amount_normalizer = amount_normalizer or AmountNormalizer()
        if tolerance is None:
            tolerance = get_config("postprocessing.amount.tolerance", 0.02)
        self.tolerance = Decimal(str(tolerance))
        logger.debug(f"AmountValidator initialized (tolerance: {self.tolerance})")

    def validate(self, amount_str: str) -> Tuple[bool, str]:
        """
        Validate an amount string with detailed feedback.

        Returns:
            Tuple of (is_valid, message).
        """
        if not amount_str:
            return False, "Amount is empty"

        value = self.amount_normalizer.to_decimal(amount_str)
        if value is None:
            return False, f"Could not parse amount: {amount_str}"

        if value < 0:
            return False, "Amount cannot be negative"

        return True, "Valid amount"

    def check_totals(
        self,
        subtotal: Optional[str],
        tax: Optional[str],
        total: Optional[str]
    ) -> Tuple[bool, str]:
        """
        Check that subtotal + tax matches the total.

        Missing tax counts as zero; without subtotal or total there is
        nothing to check.
        """
        to_decimal = self.amount_normalizer.to_decimal
        sub_value = to_decimal(subtotal)
        total_value = to_decimal(total)
        tax_value = to_decimal(tax) if tax else Decimal(0)

        if sub_value is None or total_value is None or tax_value is None:
            return True, "Totals not checked"

        expected = sub_value + tax_value
        if abs(expected - total_value) > self.tolerance:
            return False, (
                f"Subtotal + tax ({self.amount_normalizer.format_amount(expected)}) "
                f"does not match total ({total})"
            )

        return True, "Totals are consistent"

    def check_line_items(
        self,
        items: Sequence[LineItem],
        subtotal: Optional[str]
    ) -> Tuple[bool, str]:
        """Check that the line totals add up to the subtotal."""
        sub_value = self.amount_normalizer.to_decimal(subtotal)
        if not items or sub_value is None:
            return True, "Line items not checked"

        line_sum = Decimal(0)
        for item in items:
            value = self.amount_normalizer.to_decimal(item.line_total)
            if value is None:
                return True, "Line items not checked"
            line_sum += value

        if abs(line_sum - sub_value) > self.tolerance:
            return False, (
                f"Line totals ({self.amount_normalizer.format_amount(line_sum)}) "
                f"do not match subtotal ({subtotal})"
            )

        return True, "Line items are consistent"


class FieldValidator:
    """
    General field validation for invoice records.

    Example:
        >>> validator = FieldValidator()
        >>> validator.check_required_fields({"total": None})
        (False, ['total'])
    """

    AMOUNT_FIELDS = ('subtotal', 'tax', 'total')
    DATE_FIELDS = ('invoice_date', 'due_date')

    def __init__(
        self,
        required_fields: Optional[List[str]] = None,
        amount_validator: Optional[AmountValidator] = None,
        date_validator: Optional[DateValidator] = None
    ) -> None:
        if required_fields is None:
            required_fields = get_config(
                "postprocessing.validation.required_fields",
                ["total"]
            )
        self.required_fields = list(required_fields)

        self.amount_validator = amount_validator or AmountValidator()
        self.date_validator = date_validator or DateValidator()

        logger.debug(f"FieldValidator initialized (required: {self.required_fields})")

    def validate_field(self, field_name: str, value: str) -> Tuple[bool, str]:
        """
        Validate a specific field by name.

        Returns:
            Tuple of (is_valid, message).
        """
        if field_name in self.AMOUNT_FIELDS:
            return self.amount_validator.validate(value)
        if field_name in self.DATE_FIELDS:
            return self.date_validator.validate(value)

        if value and value.strip():
            return True, "Field has value"
        return False, "Field is empty"

    def check_required_fields(
        self,
        fields: Dict[str, Any]
    ) -> Tuple[bool, List[str]]:
        """
        Check if all required fields are present.

        Returns:
            Tuple of (all_present, list of missing fields).
        """
        missing = []

        for required in self.required_fields:
            value = fields.get(required)
            if not value or str(value).strip() == "":
                missing.append(required)

        return len(missing) == 0, missing

    def validate_record(self, record: InvoiceRecord) -> 'ValidationResult':
        """Run every field and cross-field check on a record."""
        validation = ValidationResult()

        for field_name, value in record.fields.items():
            if value:
                is_valid, message = self.validate_field(field_name, value)
                validation.add_field_result(field_name, is_valid, message)

        _, missing = self.check_required_fields(record.fields)
        for field_name in missing:
            validation.add_error(f"Required field missing: {field_name}")

        is_valid, message = self.amount_validator.check_totals(
            record.subtotal, record.tax, record.total
        )
        if not is_valid:
            validation.add_warning(message)

        is_valid, message = self.amount_validator.check_line_items(
            record.line_items, record.subtotal
        )
        if not is_valid:
            validation.add_warning(message)

        if record.invoice_date and record.due_date:
            is_valid, message = self.date_validator.is_due_after_invoice(
                record.invoice_date, record.due_date
            )
            if not is_valid:
                validation.add_warning(message)

        return validation


class ValidationResult:
    """
    Contains the result of validation checks.

    Attributes:
        is_valid: Overall validation result
        errors: List of error messages
        warnings: List of warning messages
        field_results: Per-field validation results
    """

    def __init__(self):
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.field_results: Dict[str, Tuple[bool, str]] = {}

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(message)

    def add_field_result(self, field: str, is_valid: bool, message: str) -> None:
        """Add a field-level validation result."""
        self.field_results[field] = (is_valid, message)
        if not is_valid:
            self.add_error(f"{field}: {message}")
