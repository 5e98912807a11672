"""
Custom Exceptions Module.

The extraction engine itself never raises for malformed documents: missing
fields degrade to None. The exceptions below cover what happens around the
engine: reading source documents and loading configuration.

Exception Hierarchy:
    InvoiceFieldsError (base)
    ├── InputError
    │   ├── DocumentNotFoundError
    │   ├── UnsupportedDocumentError
    │   └── CorruptedDocumentError
    └── ConfigurationError
"""


class InvoiceFieldsError(Exception):
    """
    Base exception for all invoice field extraction errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceFieldsError):
    """Base exception for source document errors."""
    pass


class DocumentNotFoundError(InputError):
    """Raised when the source document cannot be found."""

    def __init__(self, filepath: str):
        message = f"Document not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class UnsupportedDocumentError(InputError):
    """
    Raised when a document is neither OCR text nor a block payload.

    Example:
        >>> raise UnsupportedDocumentError(".pdf", [".txt", ".json"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported document type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class CorruptedDocumentError(InputError):
    """Raised when a document cannot be decoded or parsed."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable document: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(InvoiceFieldsError):
    """Raised when a configured value (e.g. a regex pattern) is unusable."""

    def __init__(self, key: str, reason: str = None):
        message = f"Invalid configuration value: {key}"
        details = {"key": key, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceFieldsError',
    'InputError',
    'DocumentNotFoundError',
    'UnsupportedDocumentError',
    'CorruptedDocumentError',
    'ConfigurationError',
]
