"""Exception hierarchy for bucket-tools."""

from typing import Optional


class BucketToolsError(Exception):
    """Base exception for all bucket-tools errors."""

    pass


class ValidationError(BucketToolsError):
    """Raised when validation fails."""

    pass


class ConfigurationError(BucketToolsError):
    """Raised when required store configuration is missing or invalid."""

    pass


class TransportError(BucketToolsError):
    """Raised when the network or TLS layer fails during a store request."""

    pass


class StoreError(BucketToolsError):
    """Raised when the object store rejects a request."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class LocalIOError(BucketToolsError):
    """Raised when a local directory or file cannot be created or written."""

    pass


class PathContainmentError(LocalIOError):
    """Raised when a destination path would escape the download root."""

    pass


class EnumerationError(BucketToolsError):
    """Raised when listing a prefix fails; aborts the bulk operation."""

    pass
