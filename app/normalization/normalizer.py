"""Maps an extracted fine notice onto the canonical record columns.

Normalization never raises on bad data: every problem is collected into
``NormalizationResult.validation_errors`` and the affected column is left
as ``None``. The caller decides whether the errors are fatal.
"""

import math
import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel

from app.normalization.models import NormalizationResult, NormalizedUpdate

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DAY_FIRST_DATE_RE = re.compile(r"^(\d{2})[/-](\d{2})[/-](\d{4})$")

_LOCATION_FIELDS = ("street_name", "city", "department_code", "country")


def normalize_date(raw: str) -> str | None:
    """Convert ``YYYY-MM-DD``, ``DD/MM/YYYY`` or ``DD-MM-YYYY`` to an ISO date.

    Returns None for any other shape and for impossible calendar dates
    such as 31/02/2024.
    """
    trimmed = raw.strip()
    match = _ISO_DATE_RE.match(trimmed)
    if match:
        year, month, day = match.groups()
    else:
        match = _DAY_FIRST_DATE_RE.match(trimmed)
        if not match:
            return None
        day, month, year = match.groups()

    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def normalize_extracted_fine(extracted: Mapping[str, Any] | BaseModel) -> NormalizationResult:
    """Build the record update for *extracted* and collect validation errors."""
    data = extracted.model_dump() if isinstance(extracted, BaseModel) else dict(extracted)
    errors: list[str] = []

    fine_number = _build_fine_number(data)
    if not fine_number:
        errors.append("fine_number is required")

    fine_amount = _build_fine_amount(data)
    if fine_amount is None:
        errors.append("fine_amount must be a finite number")

    fine_date = _build_fine_date(data)
    if fine_date is None:
        errors.append("fine_date is required and must be parseable")

    updates = NormalizedUpdate(
        ai_analysis=data,
        fine_number=fine_number or None,
        fine_amount=fine_amount,
        fine_date=fine_date,
        location=_build_location(data),
        violation_type=_build_violation_type(data),
    )
    return NormalizationResult(updates=updates, validation_errors=errors)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    return value if isinstance(value, Mapping) else {}


def _build_fine_number(data: Mapping[str, Any]) -> str:
    raw = _section(data, "fine_identifiers").get("fine_number")
    return raw.strip() if isinstance(raw, str) else ""


def _build_fine_amount(data: Mapping[str, Any]) -> float | None:
    raw = _section(data, "penalty").get("base_amount_eur")
    # bool is an int subclass
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw):
        return None
    return float(raw)


def _build_fine_date(data: Mapping[str, Any]) -> str | None:
    raw = _section(data, "notice_dates").get("infraction_date")
    if not isinstance(raw, str) or not raw:
        return None
    return normalize_date(raw)


def _build_location(data: Mapping[str, Any]) -> str | None:
    section = _section(data, "location")
    parts = [
        value.strip()
        for value in (section.get(name) for name in _LOCATION_FIELDS)
        if isinstance(value, str) and value.strip()
    ]
    return ", ".join(parts) if parts else None


def _build_violation_type(data: Mapping[str, Any]) -> str | None:
    raw = _section(data, "infraction").get("infraction_category")
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None
