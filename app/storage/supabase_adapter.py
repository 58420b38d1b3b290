from typing import Any

from app.logging.logger import Log
from app.storage.base import Downloadable, to_bytes
from app.storage.exceptions import StorageDownloadError


class SupabaseStorageAdapter(Downloadable):
    """Downloads documents from Supabase Storage."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_credentials(cls, url: str, service_role_key: str) -> "SupabaseStorageAdapter":
        from supabase import create_client

        return cls(create_client(url, service_role_key))

    def download(self, bucket: str, path: str) -> bytes:
        try:
            data = self._client.storage.from_(bucket).download(path)
        except Exception as exc:
            raise StorageDownloadError(f"storage download failed: {exc}") from exc
        content = to_bytes(data)
        Log.debug(f"Downloaded {len(content)} bytes from {bucket}/{path}")
        return content
