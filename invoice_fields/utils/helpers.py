"""
Helper Utilities Module.

Small, generic helpers shared by the CLI and the parsers.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - validate_file_exists: Check a path is a regular file
    - read_text_document: Read an OCR text dump
    - load_block_document: Read a document-analysis JSON payload
    - compile_patterns: Compile configured regex patterns
"""

import json
import re
from pathlib import Path
from typing import Any, Iterable, List, Pattern, Union

from .exceptions import (
    ConfigurationError,
    CorruptedDocumentError,
    DocumentNotFoundError,
)


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension, including the dot.

    Example:
        >>> get_file_extension("invoice.JSON")
        '.json'
    """
    return Path(filepath).suffix.lower()


def validate_file_exists(filepath: Union[str, Path]) -> bool:
    """Check if a file exists and is a regular file."""
    path = Path(filepath)
    return path.exists() and path.is_file()


def read_text_document(filepath: Union[str, Path]) -> str:
    """
    Read recognized text produced by an upstream OCR step.

    Args:
        filepath: Path to a UTF-8 text file.

    Returns:
        File contents.

    Raises:
        DocumentNotFoundError: If the file does not exist.
        CorruptedDocumentError: If the file cannot be decoded.
    """
    if not validate_file_exists(filepath):
        raise DocumentNotFoundError(str(filepath))

    try:
        return Path(filepath).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise CorruptedDocumentError(str(filepath), str(e))


def load_block_document(filepath: Union[str, Path]) -> Any:
    """
    Read a document-analysis response saved as JSON.

    The payload is returned as decoded; shape checks are left to the graph
    parser, which tolerates malformed blocks.

    Raises:
        DocumentNotFoundError: If the file does not exist.
        CorruptedDocumentError: If the file is not valid JSON.
    """
    if not validate_file_exists(filepath):
        raise DocumentNotFoundError(str(filepath))

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptedDocumentError(str(filepath), str(e))


def compile_patterns(
    patterns: Iterable[str],
    key: str,
    flags: int = re.IGNORECASE
) -> List[Pattern]:
    """
    Compile regex patterns read from configuration.

    Args:
        patterns: Pattern strings.
        key: Configuration key the patterns came from, for error reporting.
        flags: Regex flags applied to every pattern.

    Raises:
        ConfigurationError: If a pattern does not compile.
    """
    compiled = []
    for pattern in patterns or []:
        try:
            compiled.append(re.compile(pattern, flags))
        except re.error as e:
            raise ConfigurationError(key, f"{pattern!r}: {e}")
    return compiled
