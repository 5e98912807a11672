"""
Data Normalizers Module.

This module provides normalization functions for:
    - OCR-mangled currency amounts
    - Derived amounts (tax from a percentage)
    - Raw text repairs applied before line classification
    - Date parsing for cross-field checks

Author: ML Engineering Team
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from dateutil import parser as date_parser

from config import get_config
from invoice_fields.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class AmountNormalizer:
    """
    Repairs amount tokens damaged by OCR.

    OCR regularly drops the decimal point of currency amounts ("1500" for
    "15.00") and merges neighbouring tokens ("Tax6.25%"). The normalizer
    undoes the common cases and otherwise leaves input untouched; it never
    raises.

    Attributes:
        decimal_places: Precision of computed amounts

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.normalize("1500")
        '15.00'
        >>> normalizer.normalize("9.06")
        '9.06'
        >>> normalizer.compute_tax("145.00", "6.25")
        '9.06'
    """

    # Whitespace-delimited token made only of digits, dots and commas
    NUMERIC_TOKEN = re.compile(r'^[\d.,]+$')

    # Bare integer that most likely lost its decimal point
    MISSING_DECIMAL = re.compile(r'^\d{3,4}$')

    # First amount-looking run inside free text
    AMOUNT_IN_TEXT = re.compile(r'\d[\d,]*(?:\.\d+)?')

    # "Sales Tax 6.25% 906" -> "Sales Tax 6.25%"
    STRAY_DIGITS_AFTER_PERCENT = re.compile(
        r'(Sales\s+Tax\s+\d+(?:[.,]\d+)?\s*%)[ \t]+\d+[ \t]*\r?$',
        re.IGNORECASE | re.MULTILINE
    )

    # "Tax6.25%" -> "Tax 6.25%"
    MERGED_TAX_LABEL = re.compile(r'\b(Tax)(\d)', re.IGNORECASE)

    CURRENCY_SYMBOLS = ['$', '€', '£', '¥', '₹']

    def __init__(self, decimal_places: Optional[int] = None) -> None:
        """Initialize the amount normalizer with configuration."""
        if decimal_places is None:
            decimal_places = get_config("postprocessing.amount.decimal_places", 2)
        self.decimal_places = int(decimal_places)
        self._quantum = Decimal(1).scaleb(-self.decimal_places)

        logger.debug("AmountNormalizer initialized")

    def normalize(self, token: Optional[str]) -> Optional[str]:
        """
        Normalize a raw numeric token into a canonical decimal string.

        Tokens that already carry a decimal point are returned unchanged.
        A bare 3- or 4-digit integer gets a decimal point two places from the
        end. Anything else is returned unchanged.

        Args:
            token: Raw token (e.g. "1500").

        Returns:
            Canonical decimal string (e.g. "15.00").

        Example:
            >>> normalizer.normalize("206")
            '2.06'
            >>> normalizer.normalize("7")
            '7'
        """
        if not token or not isinstance(token, str):
            return token

        if '.' in token:
            return token

        if self.MISSING_DECIMAL.match(token):
            repaired = f"{token[:-2]}.{token[-2:]}"
            logger.debug(f"Inserted missing decimal point: '{token}' -> '{repaired}'")
            return repaired

        return token

    def is_numeric_token(self, token: str) -> bool:
        """Check whether a token is made only of digits, dots and commas."""
        return bool(token) and bool(self.NUMERIC_TOKEN.match(token)) \
            and any(c.isdigit() for c in token)

    def extract_amount(self, text: Optional[str]) -> Optional[str]:
        """
        Extract and normalize the first amount in free text.

        Args:
            text: Text such as "$154.06" or "USD 1,500".

        Returns:
            Normalized amount string or None.
        """
        if not text:
            return None

        for symbol in self.CURRENCY_SYMBOLS:
            text = text.replace(symbol, ' ')

        match = self.AMOUNT_IN_TEXT.search(text)
        if not match:
            return None
        return self.normalize(match.group(0))

    def to_decimal(self, amount: Optional[str]) -> Optional[Decimal]:
        """
        Convert an amount string to Decimal.

        Thousands separators and currency symbols are ignored. Returns None
        when the string is not a number.
        """
        if not amount:
            return None

        cleaned = amount.replace(',', '')
        for symbol in self.CURRENCY_SYMBOLS:
            cleaned = cleaned.replace(symbol, '')

        try:
            return Decimal(cleaned.strip())
        except InvalidOperation:
            return None

    def compute_tax(self, subtotal: Optional[str], percent: Optional[str]) -> Optional[str]:
        """
        Compute tax as subtotal * percent / 100, rounded half-up.

        Args:
            subtotal: Subtotal amount string (e.g. "145.00").
            percent: Tax percentage without the sign (e.g. "6.25").

        Returns:
            Tax amount string (e.g. "9.06"), or None if either input is
            not a number or the result exceeds Decimal precision.
        """
        base = self.to_decimal(subtotal)
        rate = self.to_decimal(percent.replace(',', '.') if percent else percent)
        if base is None or rate is None:
            return None

        try:
            tax = (base * rate / Decimal(100)).quantize(self._quantum, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            logger.warning(f"Tax on {subtotal} at {percent}% exceeds Decimal precision")
            return None
        return str(tax)

    def format_amount(self, value: Decimal) -> str:
        """Format a Decimal with the configured precision, as-is when too large."""
        try:
            return str(value.quantize(self._quantum, rounding=ROUND_HALF_UP))
        except InvalidOperation:
            return str(value)

    def repair_text(self, text: str) -> str:
        """
        Undo OCR token damage in raw text before it is classified.

        Repairs:
            - drop a stray integer OCR appends after a tax percentage
            - split "Tax" from a digit run merged onto it

        Args:
            text: Raw recognized text.

        Returns:
            Repaired text.
        """
        if not text:
            return text or ''

        repaired = self.STRAY_DIGITS_AFTER_PERCENT.sub(r'\1', text)
        repaired = self.MERGED_TAX_LABEL.sub(r'\1 \2', repaired)

        if repaired != text:
            logger.debug("Applied OCR text repairs")
        return repaired


class DateNormalizer:
    """
    Parses invoice date strings for cross-field validation.

    Extracted dates are reported exactly as printed; this class is only used
    to compare them.

    Example:
        >>> DateNormalizer(dayfirst=True).parse("26/02/2019")
        datetime.datetime(2019, 2, 26, 0, 0)
    """

    def __init__(self, dayfirst: Optional[bool] = None) -> None:
        """Initialize the date normalizer with configuration."""
        if dayfirst is None:
            dayfirst = get_config("postprocessing.date.dayfirst", True)
        self.dayfirst = bool(dayfirst)

        logger.debug(f"DateNormalizer initialized (dayfirst: {self.dayfirst})")

    def parse(self, date_str: Optional[str]) -> Optional[datetime]:
        """
        Parse a date string.

        Returns:
            Parsed datetime, or None if the string is not a date.
        """
        if not date_str:
            return None

        try:
            return date_parser.parse(date_str, dayfirst=self.dayfirst)
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse date: {date_str}")
            return None
