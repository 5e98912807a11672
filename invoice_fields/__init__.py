"""
Invoice Field Extraction Engine.

Turns the output of an upstream OCR or document-analysis step into a
structured invoice record. Each module has a single responsibility.

Modules:
    - graph: Block graph parsing and key/value flattening
    - text: Line classification and line-item scanning
    - postprocessor: Amount repair, normalization and validation
    - models: InvoiceRecord and related result types
    - extraction: InvoiceExtractor, the single entry point
    - utils: Logging, exceptions and file helpers

Architecture:
    blocks -> GraphKeyValueExtractor -> KeyValueMapper ----\\
                                                            -> PostProcessor -> InvoiceRecord
    text   -> LineClassifier + LineItemParser ------------/
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

from .extraction import InvoiceExtractor
from .models import NOT_FOUND, GraphExtraction, InvoiceRecord, LineItem

__all__ = [
    'InvoiceExtractor',
    'InvoiceRecord',
    'GraphExtraction',
    'LineItem',
    'NOT_FOUND',
]
