"""Application use cases: one entry point per workflow."""

from app.application.use_cases.tasks import (
    ReminderRunResult,
    TaskReminderService,
    TaskWorkflowService,
)

__all__ = ["ReminderRunResult", "TaskReminderService", "TaskWorkflowService"]
