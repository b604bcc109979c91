"""Domain value objects for the Taskflow application.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass
from datetime import timedelta

from app.domain.enums import DurationUnit
from app.domain.exceptions import ValidationException

# Role keys: lowercase letters/digits with optional underscores (e.g. generalmanager).
_ROLE_NAME_RE = re.compile(r"^[a-z0-9]+(_[a-z0-9]+)*$")


@dataclass(frozen=True)
class Duration:
    """Task duration used to derive the due date (creation time + duration).

    value must be a positive whole number of hours or days.
    """

    value: int
    unit: DurationUnit

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationException("Duration must be a whole number", field="duration")
        if self.value <= 0:
            raise ValidationException("Duration must be greater than 0", field="duration")
        if not isinstance(self.unit, DurationUnit):
            try:
                object.__setattr__(self, "unit", DurationUnit(self.unit))
            except ValueError:
                raise ValidationException(
                    f"Duration unit must be one of {DurationUnit.values()}",
                    field="duration_unit",
                ) from None

    def as_timedelta(self) -> timedelta:
        if self.unit == DurationUnit.HOURS:
            return timedelta(hours=self.value)
        return timedelta(days=self.value)


@dataclass(frozen=True)
class RoleName:
    """Value object for a role key (unique, lower-cased, 2-50 characters)."""

    value: str

    def __post_init__(self) -> None:
        normalized = (self.value or "").strip().lower()
        if len(normalized) < 2 or len(normalized) > 50:
            raise ValidationException("Role name must be 2-50 characters", field="name")
        if not _ROLE_NAME_RE.match(normalized):
            raise ValidationException(
                "Role name must be lowercase alphanumeric with optional underscores",
                field="name",
            )
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
