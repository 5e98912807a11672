"""
Post-Processing Module for the Invoice Field Extraction Engine.

This module provides functionality for:
    - OCR amount repair and derived tax
    - Raw text repairs
    - Field and cross-field validation
    - Data cleaning and standardization

Author: ML Engineering Team
"""

from .processor import PostProcessor
from .validators import DateValidator, AmountValidator, FieldValidator, ValidationResult
from .normalizers import DateNormalizer, AmountNormalizer

__all__ = [
    'PostProcessor',
    'DateValidator',
    'AmountValidator',
    'FieldValidator',
    'ValidationResult',
    'DateNormalizer',
    'AmountNormalizer'
]
