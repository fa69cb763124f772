"""
Schedule variance models.

Variances are derived from a project on every read and never persisted.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Variance(BaseModel):
    """Signed day difference between a milestone's original plan and its current date."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Current-date key of the milestone (e.g. fabricationStart)")
    display_name: str
    baseline_date: date
    current_date: date
    days_difference: int = Field(..., description="current - baseline, in calendar days")
    is_delayed: bool

    @model_validator(mode="after")
    def _check_direction(self) -> "Variance":
        if self.days_difference == 0:
            raise ValueError("a variance must have a nonzero day difference")
        if self.is_delayed != (self.days_difference > 0):
            raise ValueError("is_delayed must match the sign of days_difference")
        return self

    @property
    def magnitude(self) -> int:
        return abs(self.days_difference)

    @property
    def signed_label(self) -> str:
        """``+9 days`` for delays, ``-3 days`` for advances."""
        sign = "+" if self.days_difference > 0 else ""
        return f"{sign}{self.days_difference} days"

    @property
    def status_label(self) -> str:
        return "Delayed" if self.is_delayed else "Advanced"
