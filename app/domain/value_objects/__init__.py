"""Domain value objects and shared value types."""

from app.domain.value_objects.core import Duration, RoleName

__all__ = [
    "Duration",
    "RoleName",
]
