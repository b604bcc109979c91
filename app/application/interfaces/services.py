"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators the task core calls out to (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import ActorType, AuditAction, TaskEventKind

if TYPE_CHECKING:
    from app.application.dtos.task import ReminderDigest
    from app.domain.entities.task import TaskEntity


# Notification service interface
class INotificationService(Protocol):
    """Fire-and-forget lifecycle notifications. Nothing is returned to the caller."""

    def emit(
        self,
        kind: TaskEventKind,
        task: TaskEntity,
        recipient_ids: tuple[str, ...],
        note: str | None = None,
    ) -> None:
        """Schedule delivery of one lifecycle event; never raises."""

    def emit_reminder(self, digest: ReminderDigest) -> None:
        """Schedule delivery of one assignee reminder digest; never raises."""


# Notification sender interface (delivery channel behind the dispatcher)
class INotificationSender(Protocol):
    """Delivers one rendered notification to one contact (email/WhatsApp/log)."""

    async def send(self, contact: str, subject: str, body: str) -> None:
        """Deliver or raise; the dispatcher logs failures."""


# Audit service interface
class IAuditService(Protocol):
    """Protocol for emitting audit records."""

    async def emit_audit_event(
        self,
        entity_type: str,
        action: AuditAction,
        entity_id: str,
        entity_data: dict[str, Any],
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit one audit record."""
