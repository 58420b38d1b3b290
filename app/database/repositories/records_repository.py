from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.records.base import RecordStore
from app.records.exceptions import RecordStoreError

WRITABLE_COLUMNS = frozenset(
    {
        "status",
        "processing_error",
        "processed_at",
        "webhook_audit",
        "ai_analysis",
        "fine_number",
        "fine_amount",
        "fine_date",
        "location",
        "violation_type",
    }
)
LOOKUP_COLUMNS = frozenset({"id", "file_name"})
READABLE_COLUMNS = frozenset({"id", "file_name", "file_url", "status"}) | WRITABLE_COLUMNS


class RecordsRepository(RecordStore):
    """Database operations for the fine records table."""

    def __init__(self, table: str = "records") -> None:
        self._table = table

    def update_by_column(
        self,
        column: str,
        value: str,
        fields: dict[str, Any],
        max_rows: int | None = None,
    ) -> int:
        """Update *fields* on rows where *column* = *value* and return the row count.

        If *max_rows* is set and the statement touches more rows, the
        transaction is rolled back and the matched count is still returned.

        Raises:
            ValueError: on a non-whitelisted column or empty fields.
            RecordStoreError: if the database rejects the update.
        """
        self._check_lookup_column(column)
        if not fields:
            raise ValueError("fields must not be empty")
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"columns are not writable: {sorted(unknown)}")

        query = self.build_update_query(column, list(fields))
        params = [_adapt(v) for v in fields.values()] + [value]
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    updated = len(cur.fetchall())
                if max_rows is not None and updated > max_rows:
                    conn.rollback()
                else:
                    conn.commit()
        except psycopg.Error as exc:
            raise RecordStoreError(f"record store update failed: {exc}") from exc
        return updated

    def select_one(
        self, column: str, value: str, columns: list[str]
    ) -> dict[str, Any] | None:
        """Fetch *columns* of the first row where *column* = *value*.

        Raises:
            RecordStoreError: if the database rejects the query.
        """
        self._check_lookup_column(column)
        unknown = set(columns) - READABLE_COLUMNS
        if not columns or unknown:
            raise ValueError(f"columns are not readable: {sorted(unknown) or columns}")

        query = self.build_select_query(column, columns)
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(query, (value,))
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise RecordStoreError(f"record store select failed: {exc}") from exc
        return dict(row) if row is not None else None

    def build_update_query(self, column: str, field_names: list[str]) -> sql.Composed:
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in field_names
        )
        return sql.SQL("UPDATE {table} SET {assignments} WHERE {column} = %s RETURNING id").format(
            table=sql.Identifier(self._table),
            assignments=assignments,
            column=sql.Identifier(column),
        )

    def build_select_query(self, column: str, columns: list[str]) -> sql.Composed:
        return sql.SQL("SELECT {columns} FROM {table} WHERE {column} = %s LIMIT 1").format(
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            table=sql.Identifier(self._table),
            column=sql.Identifier(column),
        )

    @staticmethod
    def _check_lookup_column(column: str) -> None:
        if column not in LOOKUP_COLUMNS:
            raise ValueError(f"cannot match records by column '{column}'")


def _adapt(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value
