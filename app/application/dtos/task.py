"""Commands and read-models for task use cases (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.entities.task import TaskEntity
from app.domain.entities.user import UserEntity
from app.domain.enums import DurationUnit, TaskPriority


@dataclass(frozen=True)
class TaskCreate:
    """Input for creating a task.

    assigned_to and task_given_by accept a user id or a contact (email or
    WhatsApp number). assigned_to is ignored for self tasks.
    """

    description: str
    duration_value: int
    duration_unit: DurationUnit = DurationUnit.DAYS
    assigned_to: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    notes: str | None = None
    is_self_task: bool = False
    task_given_by: str | None = None
    task_given_by_name: str | None = None


@dataclass(frozen=True)
class TaskUpdate:
    """Partial update of a task. None means unchanged."""

    description: str | None = None
    priority: TaskPriority | None = None
    notes: str | None = None
    due_date: datetime | None = None
    assigned_to: str | None = None

    def has_detail_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.description, self.priority, self.notes, self.due_date)
        )


@dataclass(frozen=True)
class ReminderDigest:
    """Open tasks of one assignee for the daily reminder."""

    assignee: UserEntity
    tasks: list[TaskEntity] = field(default_factory=list)
    overdue: list[TaskEntity] = field(default_factory=list)
