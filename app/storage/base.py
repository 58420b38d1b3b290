from abc import ABC, abstractmethod
from typing import Any

from app.storage.exceptions import StorageDownloadError


class Downloadable(ABC):
    """Contract for object storage backends that serve document bytes."""

    @abstractmethod
    def download(self, bucket: str, path: str) -> bytes:
        """Download the object stored at *path* in *bucket*.

        Returns:
            The non-empty object content.

        Raises:
            StorageDownloadError: on backend errors or an empty result.
        """


def to_bytes(data: Any) -> bytes:
    """Convert the shapes storage clients return into a single bytes value.

    Accepts bytes-like objects and readable file-like objects.

    Raises:
        StorageDownloadError: if the data is missing, empty, or of an unknown shape.
    """
    if data is None:
        raise StorageDownloadError("storage download returned no data")
    if isinstance(data, (bytes, bytearray, memoryview)):
        content = bytes(data)
    elif hasattr(data, "read"):
        content = data.read()
        if not isinstance(content, (bytes, bytearray)):
            raise StorageDownloadError(
                f"storage download returned unsupported stream content: {type(content).__name__}"
            )
        content = bytes(content)
    else:
        raise StorageDownloadError(
            f"storage download returned unsupported data type: {type(data).__name__}"
        )
    if not content:
        raise StorageDownloadError("storage download returned no data")
    return content
