"""Status and field updates for fine records, matched by id with a file_name fallback."""

from datetime import datetime, timezone
from typing import Any

from app.logging.logger import Log
from app.records.base import RecordStore
from app.records.exceptions import AmbiguousMatchError
from app.records.models import MatchColumn, RecordStatus, RecordUpdateResult


class RecordUpdater:
    """Writes processing state to the record store.

    Every update is attempted by record id first. When no row matches and a
    file name is known, the update is retried by file_name; more than one
    row matching the file name is treated as an error.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def update_with_fallback(
        self,
        record_id: str,
        file_name: str | None,
        fields: dict[str, Any],
    ) -> RecordUpdateResult:
        """Apply *fields* by id, then by file_name when the id matched nothing.

        Raises:
            AmbiguousMatchError: if the file_name update touched more than one row.
            RecordStoreError: if the store rejects an update.
        """
        updated_by_id = self._store.update_by_column("id", record_id, fields)
        if updated_by_id > 0:
            return RecordUpdateResult(updated_count=updated_by_id, matched_by="id")

        if file_name:
            updated_by_name = self._store.update_by_column(
                "file_name", file_name, fields, max_rows=1
            )
            if updated_by_name > 1:
                Log.error(
                    f"Ambiguous file_name update: file_name={file_name} "
                    f"updated_count={updated_by_name} fields={fields}"
                )
                raise AmbiguousMatchError("file_name matched multiple rows")
            if updated_by_name > 0:
                return RecordUpdateResult(updated_count=updated_by_name, matched_by="file_name")

        return RecordUpdateResult(updated_count=0, matched_by=None)

    def mark_processing(
        self,
        record_id: str,
        file_name: str | None = None,
        webhook_audit: dict[str, Any] | None = None,
    ) -> RecordUpdateResult:
        fields: dict[str, Any] = {"status": RecordStatus.PROCESSING}
        if webhook_audit is not None:
            fields["webhook_audit"] = webhook_audit
        return self.update_with_fallback(record_id, file_name, fields)

    def mark_processed(
        self, record_id: str, file_name: str | None = None
    ) -> RecordUpdateResult:
        return self.update_with_fallback(
            record_id,
            file_name,
            {"status": RecordStatus.PROCESSED, "processed_at": _utcnow()},
        )

    def mark_processed_with_extraction(
        self,
        record_id: str,
        file_name: str | None,
        fields: dict[str, Any],
    ) -> RecordUpdateResult:
        """Store extracted fields together with the processed status."""
        return self.update_with_fallback(
            record_id,
            file_name,
            {**fields, "status": RecordStatus.PROCESSED, "processed_at": _utcnow()},
        )

    def mark_failed(
        self,
        record_id: str,
        message: str,
        file_name: str | None = None,
        webhook_audit: dict[str, Any] | None = None,
    ) -> RecordUpdateResult:
        fields: dict[str, Any] = {"status": RecordStatus.ERROR, "processing_error": message}
        if webhook_audit is not None:
            fields["webhook_audit"] = webhook_audit
        return self.update_with_fallback(record_id, file_name, fields)

    def get_storage_path(
        self,
        record_id: str,
        matched_by: MatchColumn | None = "id",
        file_name: str | None = None,
    ) -> str | None:
        """Read the record's file_url using the column that matched the processing update."""
        if matched_by == "file_name" and file_name:
            column, value = "file_name", file_name
        else:
            column, value = "id", record_id
        row = self._store.select_one(column, value, ["file_url"])
        if row is None:
            return None
        file_url = row.get("file_url")
        return file_url if isinstance(file_url, str) and file_url else None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
