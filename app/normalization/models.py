from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NormalizedUpdate:
    """Canonical record columns derived from an extraction result."""

    ai_analysis: dict[str, Any]
    fine_number: str | None = None
    fine_amount: float | None = None
    fine_date: str | None = None
    location: str | None = None
    violation_type: str | None = None

    def to_fields(self) -> dict[str, Any]:
        return {
            "ai_analysis": self.ai_analysis,
            "fine_number": self.fine_number,
            "fine_amount": self.fine_amount,
            "fine_date": self.fine_date,
            "location": self.location,
            "violation_type": self.violation_type,
        }


@dataclass(frozen=True)
class NormalizationResult:
    """Output of the normalization step."""

    updates: NormalizedUpdate
    validation_errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors
