"""Custom exceptions for castore.

This module defines typed exceptions for better error handling and clearer
error messages throughout the store.
"""


class CastoreError(RuntimeError):
    """Base class for all castore errors."""
    pass


# Configuration Errors
class ConfigurationError(CastoreError):
    """Invalid or missing store option.

    Raised only while building a store, never by store operations.
    """
    pass


# Storage Errors
class SizeExceededError(CastoreError):
    """Input stream is larger than the store's size ceiling."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Object exceeds the maximum size of {limit} bytes. "
            f"Nothing was stored."
        )


class StoreIOError(CastoreError, OSError):
    """Underlying filesystem or stream failure.

    Always raised from the original exception, which stays available as
    ``__cause__``.
    """
    pass
