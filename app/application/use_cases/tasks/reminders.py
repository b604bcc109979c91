"""Daily reminder digest: open tasks grouped by assignee, overdue ones flagged."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from app.application.dtos.task import ReminderDigest
from app.application.interfaces.repositories import ITaskRepository, IUserRepository
from app.application.interfaces.services import INotificationService
from app.domain.entities.task import TaskEntity
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReminderRunResult:
    assignees_notified: int
    tasks_included: int
    overdue_tasks: int
    failed: int


class TaskReminderService:
    """Builds one digest per assignee of Pending / In Progress tasks.

    Inactive or missing assignees are skipped. With overdue_only, assignees
    without an overdue task get no digest.
    """

    def __init__(
        self,
        task_repo: ITaskRepository,
        user_repo: IUserRepository,
        notifier: INotificationService,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_repo = task_repo
        self._user_repo = user_repo
        self._notifier = notifier
        self._clock = clock

    async def build_digests(
        self, now: datetime | None = None, *, overdue_only: bool = False
    ) -> list[ReminderDigest]:
        now = now or self._clock()
        by_assignee: dict[str, list[TaskEntity]] = defaultdict(list)
        for task in await self._task_repo.list_open():
            by_assignee[task.assigned_to].append(task)
        if not by_assignee:
            return []

        users = {u.id: u for u in await self._user_repo.get_many(list(by_assignee))}
        digests: list[ReminderDigest] = []
        for assignee_id, tasks in by_assignee.items():
            user = users.get(assignee_id)
            if user is None or not user.is_active:
                logger.debug("Skipping reminder for unknown/inactive user %s", assignee_id)
                continue
            tasks.sort(key=lambda t: t.due_date)
            overdue = [t for t in tasks if t.is_overdue(now)]
            if overdue_only and not overdue:
                continue
            digests.append(ReminderDigest(assignee=user, tasks=tasks, overdue=overdue))
        return digests

    @traced("task_reminders.send_daily_reminders")
    async def send_daily_reminders(
        self, now: datetime | None = None, *, overdue_only: bool = False
    ) -> ReminderRunResult:
        """Emit one reminder per assignee and return counts."""
        digests = await self.build_digests(now, overdue_only=overdue_only)
        notified = 0
        for digest in digests:
            try:
                self._notifier.emit_reminder(digest)
                notified += 1
            except Exception:
                logger.exception("Failed to queue reminder for %s", digest.assignee.id)
        result = ReminderRunResult(
            assignees_notified=notified,
            tasks_included=sum(len(d.tasks) for d in digests),
            overdue_tasks=sum(len(d.overdue) for d in digests),
            failed=len(digests) - notified,
        )
        logger.info(
            "Daily reminders: %d assignee(s), %d task(s), %d overdue",
            result.assignees_notified,
            result.tasks_included,
            result.overdue_tasks,
        )
        return result
