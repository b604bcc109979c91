"""Shared enumerations for the Taskflow application.

Cross-cutting enums used by application and infrastructure (audit, actor
type, lifecycle notifications). Task and role enums live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Actor type for audit tracking (who performed the action)."""

    USER = "user"
    SYSTEM = "system"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types recorded in the audit log."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    FORWARDED = "forwarded"
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskEventKind(_ValuesMixin, str, Enum):
    """Lifecycle events handed to the notification collaborator."""

    ASSIGNED = "assigned"
    STATUS_CHANGED = "status_changed"
    FORWARDED = "forwarded"
    HANDED_TO_CREATOR = "handed_to_creator"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMMENTED = "commented"
    REMINDER = "reminder"
