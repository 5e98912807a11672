"""
Text Path Module.

Turns raw OCR text into classified regions and item rows:
    - Line splitting and section/scalar/footer classification
    - Item row detection by token shape

Author: ML Engineering Team
"""

from .classifier import (
    LineClassifier,
    ClassifiedDocument,
    Section,
    SectionRule,
    ScalarRule,
    split_lines,
)
from .line_items import LineItemParser

__all__ = [
    'LineClassifier',
    'ClassifiedDocument',
    'Section',
    'SectionRule',
    'ScalarRule',
    'split_lines',
    'LineItemParser',
]
