"""Task use cases: lifecycle orchestration and reminder digests."""

from app.application.use_cases.tasks.reminders import ReminderRunResult, TaskReminderService
from app.application.use_cases.tasks.task_workflow import TaskWorkflowService

__all__ = [
    "ReminderRunResult",
    "TaskReminderService",
    "TaskWorkflowService",
]
