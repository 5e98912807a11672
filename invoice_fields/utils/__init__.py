"""
Utility Module for the Invoice Field Extraction Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Custom exceptions
    - File and pattern helpers
"""

from .logger import setup_logger, get_logger
from .helpers import (
    ensure_directory,
    get_file_extension,
    read_text_document,
    load_block_document,
)

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'read_text_document',
    'load_block_document',
]
