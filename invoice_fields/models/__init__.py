"""
Data Models for the Invoice Field Extraction Engine.

Plain dataclasses shared by both extraction paths. They hold no behaviour
beyond conversion to and from the serializable boundary format.

Author: ML Engineering Team
"""

from .invoice_record import (
    NOT_FOUND,
    RECORD_FIELDS,
    LineItem,
    InvoiceRecord,
    GraphExtraction,
)

__all__ = [
    'NOT_FOUND',
    'RECORD_FIELDS',
    'LineItem',
    'InvoiceRecord',
    'GraphExtraction',
]
