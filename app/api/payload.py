import json
import re
from typing import Any

from app.api.exceptions import WebhookPayloadError
from app.queue.models import JobRequest

RECORD_ID_FIELD = "recordId"
FILE_NAME_FIELD = "fileName"

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value: str) -> bool:
    """Return True for UUID v1-v5 strings in canonical 8-4-4-4-12 form."""
    return _UUID_RE.match(value) is not None


def decode_json_body(raw_body: bytes) -> Any:
    """Decode the verified raw body into JSON.

    Raises:
        WebhookPayloadError: if the bytes are not valid UTF-8 JSON.
    """
    try:
        return json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise WebhookPayloadError("payload must be valid JSON") from exc


def parse_webhook_payload(body: Any) -> JobRequest:
    """Narrow an untyped webhook body into a JobRequest.

    Raises:
        WebhookPayloadError: when the body is not an object or the record id
            is missing or not a UUID string.
    """
    if not isinstance(body, dict):
        raise WebhookPayloadError("payload must be an object")

    record_id = body.get(RECORD_ID_FIELD)
    if record_id is None:
        raise WebhookPayloadError(f"{RECORD_ID_FIELD} is required")
    if not isinstance(record_id, str) or not is_uuid(record_id):
        raise WebhookPayloadError(f"{RECORD_ID_FIELD} must be a UUID string")

    file_name = body.get(FILE_NAME_FIELD)
    return JobRequest(
        record_id=record_id,
        file_name=file_name if isinstance(file_name, str) else None,
        webhook=body,
    )
