"""Send the daily reminder digest to every assignee with open tasks.

Usage:
    python -m scripts.send_daily_reminders [--overdue-only]

Meant for cron. Without the flag, REMINDER_OVERDUE_ONLY from settings decides
whether assignees with no overdue task are skipped.
"""

import asyncio
import sys

from app.application.use_cases import TaskReminderService
from app.core.config import get_settings
from app.infrastructure.persistence.database import session_factory
from app.infrastructure.persistence.repositories import TaskRepository, UserRepository
from app.infrastructure.services import (
    LogOnlyNotificationSender,
    NotificationDispatcher,
    session_contact_lookup,
)
from app.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger("scripts.send_daily_reminders")


async def main() -> None:
    settings = get_settings()
    setup_logging()
    args = sys.argv[1:]
    if args and args != ["--overdue-only"]:
        print("Usage: python -m scripts.send_daily_reminders [--overdue-only]", file=sys.stderr)
        sys.exit(1)
    overdue_only = bool(args) or settings.reminder_overdue_only

    factory = session_factory()
    notifier = NotificationDispatcher(
        LogOnlyNotificationSender(),
        session_contact_lookup(factory),
        enabled=settings.notifications_enabled,
    )
    async with factory() as session:
        service = TaskReminderService(
            TaskRepository(session), UserRepository(session), notifier
        )
        result = await service.send_daily_reminders(overdue_only=overdue_only)
    await notifier.drain()

    print(
        f"Reminders sent to {result.assignees_notified} assignee(s) "
        f"({result.tasks_included} tasks, {result.overdue_tasks} overdue, "
        f"{result.failed} failed)"
    )
    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
