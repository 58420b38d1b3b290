from pathlib import Path

from app.config.settings import Settings
from app.storage.base import Downloadable
from app.storage.local_adapter import LocalStorageAdapter
from app.storage.supabase_adapter import SupabaseStorageAdapter


class StorageFactory:
    """Creates the configured object storage adapter."""

    PROVIDERS = ("supabase", "local")

    @classmethod
    def create(cls, settings: Settings) -> Downloadable:
        provider = settings.storage_provider.lower()
        if provider == "local":
            return LocalStorageAdapter(files_root=Path(settings.storage_local_root))
        if provider == "supabase":
            if not settings.supabase_url:
                raise ValueError("supabase_url is required for storage_provider=supabase")
            if not settings.supabase_service_role_key:
                raise ValueError(
                    "supabase_service_role_key is required for storage_provider=supabase"
                )
            return SupabaseStorageAdapter.from_credentials(
                settings.supabase_url, settings.supabase_service_role_key
            )
        raise ValueError(
            f"Unknown storage provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
