from pathlib import Path

from app.storage.base import Downloadable, to_bytes
from app.storage.exceptions import StorageDownloadError


def document_file_path(files_root: Path, bucket: str, path: str) -> Path:
    """Build path to a stored document: {files_root}/{bucket}/{path}"""
    return files_root / bucket / path.lstrip("/")


class LocalStorageAdapter(Downloadable):
    """Serves documents from a directory tree, one sub-directory per bucket."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def download(self, bucket: str, path: str) -> bytes:
        """Read document bytes from disk.

        Raises:
            StorageDownloadError: if the path escapes the bucket, the file does
                not exist, or it is empty.
        """
        bucket_root = (self._files_root / bucket).resolve()
        file_path = document_file_path(self._files_root, bucket, path).resolve()
        if not file_path.is_relative_to(bucket_root):
            raise StorageDownloadError(f"storage path escapes bucket: {path}")
        if not file_path.is_file():
            raise StorageDownloadError(f"storage download failed: file not found: {path}")
        try:
            return to_bytes(file_path.read_bytes())
        except OSError as exc:
            raise StorageDownloadError(f"storage download failed: {exc}") from exc
