class RecordUpdateError(Exception):
    """Base exception for record store updates."""


class AmbiguousMatchError(RecordUpdateError):
    """Raised when a file_name fallback update matches more than one row."""


class RecordStoreError(RecordUpdateError):
    """Raised when the underlying record store rejects a query."""
