class StorageError(Exception):
    """Base exception for object storage errors."""


class StorageDownloadError(StorageError):
    """Raised when a document cannot be downloaded from storage."""
