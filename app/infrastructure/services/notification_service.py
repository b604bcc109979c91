"""Task notifications: log-only sender and a fire-and-forget dispatcher.

The dispatcher implements INotificationService. emit() renders the message
synchronously and hands delivery to a scheduler (FastAPI BackgroundTasks in
requests, asyncio tasks elsewhere). Delivery failures are logged, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from app.application.dtos.task import ReminderDigest
from app.application.interfaces.services import INotificationSender
from app.domain.entities.task import TaskEntity
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.shared.enums import TaskEventKind
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

ContactLookup = Callable[[list[str]], Awaitable[dict[str, str]]]
Scheduler = Callable[..., Any]

_SUBJECTS: dict[TaskEventKind, str] = {
    TaskEventKind.ASSIGNED: "New task #{sno} assigned to you",
    TaskEventKind.STATUS_CHANGED: "Task #{sno} is now {status}",
    TaskEventKind.FORWARDED: "Task #{sno} forwarded to {assignee}",
    TaskEventKind.HANDED_TO_CREATOR: "Task #{sno} approved by forwarder, awaiting final approval",
    TaskEventKind.APPROVED: "Task #{sno} approved",
    TaskEventKind.REJECTED: "Task #{sno} rejected",
    TaskEventKind.COMMENTED: "New comment on task #{sno}",
}


def render_task_event(
    kind: TaskEventKind, task: TaskEntity, note: str | None = None
) -> tuple[str, str]:
    """Return (subject, body) for one lifecycle event."""
    template = _SUBJECTS.get(kind, "Task #{sno} updated")
    subject = template.format(
        sno=task.sno, status=task.status.value, assignee=task.assigned_to_name
    )
    lines = [
        f"Task #{task.sno}: {task.description}",
        f"Assigned to: {task.assigned_to_name}",
        f"Created by: {task.created_by_name}",
        f"Status: {task.status.value} ({task.approval_status.value})",
        f"Due: {task.due_date.strftime('%Y-%m-%d %H:%M')} UTC",
    ]
    if note:
        lines.append(f"Note: {note}")
    return subject, "\n".join(lines)


def render_reminder(digest: ReminderDigest) -> tuple[str, str]:
    """Return (subject, body) for an assignee's daily digest."""
    subject = f"You have {len(digest.tasks)} open task(s)"
    if digest.overdue:
        subject += f", {len(digest.overdue)} overdue"
    overdue_ids = {t.id for t in digest.overdue}
    lines = [f"Hello {digest.assignee.name},", ""]
    for task in digest.tasks:
        flag = " [OVERDUE]" if task.id in overdue_ids else ""
        lines.append(
            f"#{task.sno} {task.description} | {task.status.value} | "
            f"due {task.due_date.strftime('%Y-%m-%d')}{flag}"
        )
    return subject, "\n".join(lines)


class LogOnlyNotificationSender:
    """INotificationSender that logs instead of delivering.

    Use when no outbound channel is configured.
    """

    async def send(self, contact: str, subject: str, body: str) -> None:
        logger.info("Notify: would send to %s (subject=%r)", contact, subject[:80])
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Notify body at %s (first 500 chars): %s",
                utc_now().isoformat(),
                body[:500],
            )


class NotificationDispatcher:
    """INotificationService implementation.

    Contacts for the creator and the assignee come from the task itself; any
    other recipient (a forwarder) is resolved through contact_lookup at
    delivery time.
    """

    def __init__(
        self,
        sender: INotificationSender,
        contact_lookup: ContactLookup | None = None,
        schedule: Scheduler | None = None,
        *,
        enabled: bool = True,
    ) -> None:
        self._sender = sender
        self._contact_lookup = contact_lookup
        self._schedule = schedule or self._spawn
        self._enabled = enabled
        self._pending: set[asyncio.Task[None]] = set()

    def _spawn(self, func: Callable[..., Awaitable[None]], *args: Any) -> None:
        task = asyncio.get_running_loop().create_task(func(*args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for deliveries scheduled on the event loop (scripts, shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def emit(
        self,
        kind: TaskEventKind,
        task: TaskEntity,
        recipient_ids: tuple[str, ...],
        note: str | None = None,
    ) -> None:
        if not self._enabled or not recipient_ids:
            return
        subject, body = render_task_event(kind, task, note)
        known = {
            task.created_by: task.created_by_contact,
            task.assigned_to: task.assigned_to_contact,
        }
        logger.debug(
            "Scheduling %s notification for task %s to %d recipient(s)",
            kind.value,
            task.id,
            len(recipient_ids),
        )
        self._schedule(self._deliver, tuple(recipient_ids), known, subject, body)

    def emit_reminder(self, digest: ReminderDigest) -> None:
        if not self._enabled:
            return
        subject, body = render_reminder(digest)
        self._schedule(
            self._deliver,
            (digest.assignee.id,),
            {digest.assignee.id: digest.assignee.contact},
            subject,
            body,
        )

    async def _deliver(
        self,
        recipient_ids: tuple[str, ...],
        known: dict[str, str | None],
        subject: str,
        body: str,
    ) -> None:
        contacts = {rid: c for rid, c in known.items() if c}
        missing = [rid for rid in recipient_ids if rid not in contacts]
        if missing and self._contact_lookup is not None:
            try:
                contacts.update(await self._contact_lookup(missing))
            except Exception:
                logger.exception("Contact lookup failed for %s", missing)
        for rid in recipient_ids:
            contact = contacts.get(rid)
            if not contact:
                logger.warning("No contact for user %s; notification skipped", rid)
                continue
            await self._deliver_safely(contact, subject, body)

    async def _deliver_safely(self, contact: str, subject: str, body: str) -> None:
        try:
            await self._sender.send(contact, subject, body)
        except Exception:
            logger.exception("Notification delivery to %s failed", contact)


def session_contact_lookup(
    session_factory: Callable[[], Any],
) -> ContactLookup:
    """Build a ContactLookup that opens its own session (delivery runs after commit)."""
    async def lookup(user_ids: Iterable[str]) -> dict[str, str]:
        async with session_factory() as session:
            users = await UserRepository(session).get_many(list(user_ids))
        return {u.id: u.contact for u in users if u.contact}

    return lookup
