from dataclasses import dataclass
from typing import Literal

MatchColumn = Literal["id", "file_name"]


class RecordStatus:
    """Processing lifecycle of a record: pending -> processing -> processed | error."""

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


@dataclass(frozen=True)
class RecordUpdateResult:
    """How many rows an update touched and which column matched them."""

    updated_count: int
    matched_by: MatchColumn | None = None
