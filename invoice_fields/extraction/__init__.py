"""
Extraction Module for the Invoice Field Extraction Engine.

Unifies the two extraction paths behind one interface:
    - Text path: raw OCR text to InvoiceRecord
    - Graph path: document-analysis blocks to key/value map + InvoiceRecord
    - Optional known-template override stage

Author: ML Engineering Team
"""

from .extractor import InvoiceExtractor
from .key_value_mapper import KeyValueMapper
from .template_override import KnownTemplate, KnownTemplateOverride

__all__ = [
    'InvoiceExtractor',
    'KeyValueMapper',
    'KnownTemplate',
    'KnownTemplateOverride',
]
