"""Task API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.entities.task import TaskComment, TaskEntity
from app.domain.enums import ApprovalStatus, DurationUnit, TaskPriority, TaskStatus


class TaskCreateRequest(BaseModel):
    """Request body for creating a task.

    assigned_to and task_given_by take a user id, email or WhatsApp number.
    """

    description: str = Field(..., min_length=1, max_length=5000)
    duration_value: int = Field(..., gt=0, le=10_000)
    duration_unit: DurationUnit = DurationUnit.DAYS
    assigned_to: str | None = Field(default=None, max_length=320)
    priority: TaskPriority = TaskPriority.MEDIUM
    notes: str | None = Field(default=None, max_length=5000)
    is_self_task: bool = False
    task_given_by: str | None = Field(default=None, max_length=320)
    task_given_by_name: str | None = Field(default=None, max_length=200)


class TaskUpdateRequest(BaseModel):
    """Request body for PUT /tasks/{id} (partial; omitted fields unchanged)."""

    description: str | None = Field(default=None, min_length=1, max_length=5000)
    priority: TaskPriority | None = None
    notes: str | None = Field(default=None, max_length=5000)
    due_date: datetime | None = None
    assigned_to: str | None = Field(default=None, max_length=320)


class TaskStatusRequest(BaseModel):
    """Status is validated by the task itself so an illegal value maps to 409."""

    status: str = Field(..., min_length=1, max_length=32)


class TaskForwardRequest(BaseModel):
    assigned_to: str = Field(..., min_length=1, max_length=320)


class CommentCreateRequest(BaseModel):
    text: str = Field(..., max_length=5000)


class ApproveRequest(BaseModel):
    comments: str | None = Field(default=None, max_length=2000)


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=2000)


class CommentResponse(BaseModel):
    id: str
    text: str
    author_id: str | None
    author_name: str
    author_role: str | None
    created_at: datetime

    @classmethod
    def from_entity(cls, comment: TaskComment) -> "CommentResponse":
        return cls(
            id=comment.id,
            text=comment.text,
            author_id=comment.author_id,
            author_name=comment.author_name,
            author_role=comment.author_role,
            created_at=comment.created_at,
        )


class TaskResponse(BaseModel):
    """Task detail/list response."""

    id: str
    sno: int
    description: str
    created_by: str
    created_by_name: str
    assigned_to: str
    assigned_to_name: str
    priority: TaskPriority
    due_date: datetime
    notes: str | None
    is_self_task: bool
    task_given_by_name: str | None
    status: TaskStatus
    approval_status: ApprovalStatus
    approved_by: str | None
    approved_at: datetime | None
    approval_comments: str | None
    is_forwarded: bool
    forwarded_by: str | None
    forwarded_at: datetime | None
    forwarder_approved: bool
    current_approver: str | None
    comments: list[CommentResponse]
    version: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_entity(cls, task: TaskEntity) -> "TaskResponse":
        return cls(
            id=task.id,
            sno=task.sno,
            description=task.description,
            created_by=task.created_by,
            created_by_name=task.created_by_name,
            assigned_to=task.assigned_to,
            assigned_to_name=task.assigned_to_name,
            priority=task.priority,
            due_date=task.due_date,
            notes=task.notes,
            is_self_task=task.is_self_task,
            task_given_by_name=task.task_given_by_name,
            status=task.status,
            approval_status=task.approval_status,
            approved_by=task.approved_by,
            approved_at=task.approved_at,
            approval_comments=task.approval_comments,
            is_forwarded=task.is_forwarded,
            forwarded_by=task.forwarded_by,
            forwarded_at=task.forwarded_at,
            forwarder_approved=task.forwarder_approved,
            current_approver=task.current_approver,
            comments=[CommentResponse.from_entity(c) for c in task.comments],
            version=task.version,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
