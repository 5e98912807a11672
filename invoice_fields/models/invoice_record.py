"""
Invoice Record Data Classes.

This module defines the structured output of an extraction call. Missing
fields are held as None; the "Not found" placeholder only appears when a
record is serialized for a surrounding service.

Classes:
    LineItem: One priced row of the item table
    InvoiceRecord: Structured invoice produced by the text or graph path
    GraphExtraction: Graph-path output (key/value map, raw lines, record)

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json

NOT_FOUND = "Not found"

# Serialized field order
RECORD_FIELDS = (
    'vendor_name',
    'invoice_number',
    'buyer_name',
    'buyer_address',
    'ship_name',
    'ship_address',
    'invoice_date',
    'due_date',
    'subtotal',
    'tax',
    'total',
)


@dataclass
class LineItem:
    """
    A single priced row of the item table.

    Attributes:
        description: Item description
        quantity: Integer literal, "1" when the row carries none
        unit_price: Decimal string
        line_total: Decimal string

    Example:
        >>> LineItem("Front and rear brake cables", "1", "100.00", "100.00").to_text()
        '1 Front and rear brake cables 100.00 100.00'
    """
    description: str
    quantity: str = "1"
    unit_price: str = ""
    line_total: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary format."""
        return {
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'line_total': self.line_total,
        }

    def to_text(self) -> str:
        """Render the row the way it appears on an invoice."""
        return f"{self.quantity} {self.description} {self.unit_price} {self.line_total}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        """Create a LineItem from dictionary."""
        return cls(
            description=data.get('description', ''),
            quantity=data.get('quantity', '1'),
            unit_price=data.get('unit_price', ''),
            line_total=data.get('line_total', ''),
        )


@dataclass
class InvoiceRecord:
    """
    Structured invoice fields recovered from one document.

    Attributes:
        vendor_name: Seller company name
        invoice_number: Invoice / transaction number
        buyer_name: First line of the BILL TO block
        buyer_address: Remaining BILL TO lines, comma-joined
        ship_name: First line of the SHIP TO block
        ship_address: Remaining SHIP TO lines, comma-joined
        invoice_date: Invoice date as printed
        due_date: Payment due date as printed
        line_items: Item rows in source order
        subtotal: Subtotal amount
        tax: Tax amount
        total: Grand total
        errors: Internal failures recorded instead of raised
        warnings: Validation findings

    Example:
        >>> record = InvoiceRecord(total="154.06")
        >>> record.to_dict()['vendor_name']
        'Not found'
    """
    vendor_name: Optional[str] = None
    invoice_number: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_address: Optional[str] = None
    ship_name: Optional[str] = None
    ship_address: Optional[str] = None
    invoice_date: Optional[str] = None
    due_date: Optional[str] = None
    line_items: List[LineItem] = field(default_factory=list)
    subtotal: Optional[str] = None
    tax: Optional[str] = None
    total: Optional[str] = None

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def fields(self) -> Dict[str, Optional[str]]:
        """Scalar fields in serialized order."""
        return {name: getattr(self, name) for name in RECORD_FIELDS}

    @property
    def missing_fields(self) -> List[str]:
        """Names of scalar fields that were not resolved."""
        return [k for k, v in self.fields.items() if v is None or v == ""]

    @property
    def extracted_fields(self) -> Dict[str, str]:
        """Only the scalar fields that have values."""
        return {k: v for k, v in self.fields.items() if v is not None and v != ""}

    @property
    def extraction_rate(self) -> float:
        """Percentage of scalar fields resolved (0-100)."""
        total = len(self.fields)
        return (len(self.extracted_fields) / total) * 100 if total > 0 else 0

    @property
    def success(self) -> bool:
        return not self.errors

    def set_field(self, field_name: str, value: Optional[str]) -> None:
        """Set a scalar field; empty strings are stored as None."""
        if field_name in RECORD_FIELDS:
            setattr(self, field_name, value or None)

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    def to_dict(self, sentinel: str = NOT_FOUND) -> Dict[str, Any]:
        """
        Convert to the boundary format.

        Every scalar leaf is a string; unresolved fields become the sentinel.

        Args:
            sentinel: Placeholder for missing fields.
        """
        result: Dict[str, Any] = {
            name: (value if value else sentinel)
            for name, value in self.fields.items()
        }
        result['line_items'] = [item.to_dict() for item in self.line_items]
        return result

    def to_json(self, indent: int = 2, sentinel: str = NOT_FOUND) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(sentinel), indent=indent)

    def to_text(self) -> str:
        """
        Render the record back into invoice-shaped text.

        The layout is the one the text path reads, so extracting the rendered
        text reproduces the same record. Unresolved fields are omitted.
        """
        lines: List[str] = []

        if self.vendor_name:
            lines.append(self.vendor_name)
        if self.invoice_number:
            lines.append(f"INVOICE # {self.invoice_number}")

        for anchor, name, address in (
            ("BILL TO", self.buyer_name, self.buyer_address),
            ("SHIP TO", self.ship_name, self.ship_address),
        ):
            if name:
                lines.append(anchor)
                lines.append(name)
                if address:
                    lines.append(address)

        if self.invoice_date:
            lines.append(f"INVOICE DATE {self.invoice_date}")
        if self.due_date:
            lines.append(f"DUE DATE {self.due_date}")

        lines.extend(item.to_text() for item in self.line_items)

        if self.subtotal:
            lines.append(f"SUBTOTAL {self.subtotal}")
        if self.tax:
            lines.append(f"TAX {self.tax}")
        if self.total:
            lines.append(f"TOTAL {self.total}")

        return '\n'.join(lines)

    def copy(self) -> 'InvoiceRecord':
        """Return an independent copy of the record."""
        return InvoiceRecord(
            line_items=[LineItem(**item.to_dict()) for item in self.line_items],
            errors=list(self.errors),
            warnings=list(self.warnings),
            **self.fields
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], sentinel: str = NOT_FOUND) -> 'InvoiceRecord':
        """
        Create an InvoiceRecord from its boundary format.

        Sentinel values are read back as None.
        """
        values = {}
        for name in RECORD_FIELDS:
            value = data.get(name)
            values[name] = None if value in (None, "", sentinel) else value

        return cls(
            line_items=[LineItem.from_dict(item) for item in data.get('line_items', [])],
            **values
        )

    def __repr__(self) -> str:
        return (
            f"InvoiceRecord("
            f"vendor={self.vendor_name}, "
            f"items={len(self.line_items)}, "
            f"total={self.total}, "
            f"rate={self.extraction_rate:.0f}%)"
        )


@dataclass
class GraphExtraction:
    """
    Output of the graph path.

    Attributes:
        key_values: Form labels mapped to value text, in discovery order
        lines: Text of the LINE blocks, in source order
        record: Invoice fields mapped from the key/value pairs
    """
    key_values: Dict[str, str] = field(default_factory=dict)
    lines: List[str] = field(default_factory=list)
    record: InvoiceRecord = field(default_factory=InvoiceRecord)

    def to_dict(self, sentinel: str = NOT_FOUND) -> Dict[str, Any]:
        """Convert to the boundary format."""
        return {
            'lines': list(self.lines),
            'key_values': dict(self.key_values),
            'invoice': self.record.to_dict(sentinel),
        }

    def to_json(self, indent: int = 2, sentinel: str = NOT_FOUND) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(sentinel), indent=indent)
