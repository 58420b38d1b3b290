import copy
import io
from typing import Any

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.extraction.example_client_adapter import ExampleClientAdapter
from app.queue.models import JobRequest
from app.records.base import RecordStore

RECORD_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page fine notice PDF."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 760, "AVIS DE CONTRAVENTION")
    c.drawString(72, 740, "Numero de l'avis: 1234567890")
    c.drawString(72, 720, "Montant: 135 EUR")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def notice_payload() -> dict[str, Any]:
    """A complete, valid extracted traffic fine notice."""
    return copy.deepcopy(ExampleClientAdapter.DEFAULT_RESPONSE)


@pytest.fixture()
def job_request() -> JobRequest:
    return JobRequest(
        record_id=RECORD_ID,
        file_name="fine.pdf",
        webhook={"recordId": RECORD_ID, "fileName": "fine.pdf"},
    )


class InMemoryRecordStore(RecordStore):
    """Record store over a list of row dicts, recording every update."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows if rows is not None else []
        self.writes: list[tuple[str, str, dict[str, Any]]] = []

    def update_by_column(
        self,
        column: str,
        value: str,
        fields: dict[str, Any],
        max_rows: int | None = None,
    ) -> int:
        matched = [row for row in self.rows if row.get(column) == value]
        if max_rows is not None and len(matched) > max_rows:
            return len(matched)
        self.writes.append((column, value, dict(fields)))
        for row in matched:
            row.update(fields)
        return len(matched)

    def select_one(
        self, column: str, value: str, columns: list[str]
    ) -> dict[str, Any] | None:
        for row in self.rows:
            if row.get(column) == value:
                return {name: row.get(name) for name in columns}
        return None


@pytest.fixture()
def record_store() -> InMemoryRecordStore:
    """One pending record with a stored document path."""
    return InMemoryRecordStore(
        [
            {
                "id": RECORD_ID,
                "file_name": "fine.pdf",
                "status": "pending",
                "file_url": "user-1/fine.pdf",
            }
        ]
    )
