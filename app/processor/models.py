from dataclasses import dataclass

from app.records.models import MatchColumn


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of a successfully processed job."""

    record_id: str
    matched_by: MatchColumn | None
    status: str = "success"

    def to_dict(self) -> dict[str, str | None]:
        return {"status": self.status, "recordId": self.record_id, "matchedBy": self.matched_by}
