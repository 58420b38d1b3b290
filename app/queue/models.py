from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.queue.exceptions import InvalidJobPayloadError


class JobStatus:
    """Lifecycle states of a queued job."""

    WAITING = "waiting"
    ACTIVE = "active"
    DELAYED = "delayed"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class JobRequest:
    """Producer -> consumer contract for one fine processing job."""

    record_id: str
    file_name: str | None = None
    webhook: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the queue wire format."""
        payload: dict[str, Any] = {"recordId": self.record_id, "webhook": self.webhook}
        if self.file_name is not None:
            payload["fileName"] = self.file_name
        return payload

    @classmethod
    def from_payload(cls, payload: Any) -> "JobRequest":
        """Rebuild a JobRequest from queued job data.

        Raises:
            InvalidJobPayloadError: if recordId or webhook are missing or malformed.
        """
        if not isinstance(payload, dict):
            raise InvalidJobPayloadError("job payload must be an object")
        record_id = payload.get("recordId")
        if not isinstance(record_id, str) or not record_id:
            raise InvalidJobPayloadError("job payload is missing recordId")
        webhook = payload.get("webhook", {})
        if not isinstance(webhook, dict):
            raise InvalidJobPayloadError("job payload webhook must be an object")
        file_name = payload.get("fileName")
        return cls(
            record_id=record_id,
            file_name=file_name if isinstance(file_name, str) else None,
            webhook=webhook,
        )


@dataclass
class QueuedJob:
    """Represents a job stored in the queue backend."""

    id: str
    name: str
    data: dict[str, Any]
    status: str = JobStatus.WAITING
    attempts: int = 0
    error_message: str | None = None
    result: dict[str, Any] | None = None
    enqueued_at: datetime | None = None
    locked_at: datetime | None = None
    finished_at: datetime | None = None
