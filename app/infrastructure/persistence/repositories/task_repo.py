"""Task repository: versioned saves, gapless serial numbers, visibility queries.

Implements ITaskRepository. save() is a compare-and-set on the version
column, so two writers that loaded the same version cannot both succeed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, and_, or_, select, true, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from app.domain.authorization import TaskVisibilityScope
from app.domain.entities.task import TaskComment, TaskEntity
from app.domain.enums import (
    ApprovalStatus,
    TaskPriority,
    TaskStatus,
    TaskView,
    VisibilityKind,
)
from app.domain.exceptions import TaskVersionConflictException
from app.infrastructure.persistence.models.task import (
    SequenceCounter,
    Task,
    TaskCommentRow,
)
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.auditable_repo import (
    AuditableRepository,
)
from app.shared.enums import AuditAction
from app.shared.utils.datetime import ensure_utc

if TYPE_CHECKING:
    from app.application.interfaces.services import IAuditService

TASK_SNO_COUNTER = "task_sno"

_OPEN_STATUSES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)


def _comment_to_entity(c: TaskCommentRow) -> TaskComment:
    return TaskComment(
        id=c.id,
        text=c.text,
        author_id=c.author_id,
        author_name=c.author_name,
        author_role=c.author_role,
        created_at=ensure_utc(c.created_at),
    )


def _task_to_entity(t: Task) -> TaskEntity:
    """Map Task ORM row (with comments loaded) to TaskEntity."""
    return TaskEntity(
        id=t.id,
        sno=t.sno,
        description=t.description,
        created_by=t.created_by,
        created_by_name=t.created_by_name,
        created_by_contact=t.created_by_contact,
        assigned_to=t.assigned_to,
        assigned_to_name=t.assigned_to_name,
        assigned_to_contact=t.assigned_to_contact,
        due_date=ensure_utc(t.due_date),
        priority=TaskPriority(t.priority),
        notes=t.notes,
        is_self_task=t.is_self_task,
        task_given_by_contact=t.task_given_by_contact,
        task_given_by_name=t.task_given_by_name,
        status=TaskStatus(t.status),
        approval_status=ApprovalStatus(t.approval_status),
        approved_by=t.approved_by,
        approved_at=ensure_utc(t.approved_at),
        approval_comments=t.approval_comments,
        is_forwarded=t.is_forwarded,
        forwarded_by=t.forwarded_by,
        forwarded_at=ensure_utc(t.forwarded_at),
        forwarder_approved=t.forwarder_approved,
        current_approver=t.current_approver,
        comments=[_comment_to_entity(c) for c in t.comments],
        version=t.version,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


def _mutable_columns(task: TaskEntity) -> dict[str, Any]:
    """Columns a transition may change (identity, sno and creator are immutable)."""
    return {
        "description": task.description,
        "assigned_to": task.assigned_to,
        "assigned_to_name": task.assigned_to_name,
        "assigned_to_contact": task.assigned_to_contact,
        "priority": task.priority.value,
        "due_date": task.due_date,
        "notes": task.notes,
        "status": task.status.value,
        "approval_status": task.approval_status.value,
        "approved_by": task.approved_by,
        "approved_at": task.approved_at,
        "approval_comments": task.approval_comments,
        "is_forwarded": task.is_forwarded,
        "forwarded_by": task.forwarded_by,
        "forwarded_at": task.forwarded_at,
        "forwarder_approved": task.forwarder_approved,
        "current_approver": task.current_approver,
    }


def _comment_row(task_id: str, c: TaskComment) -> TaskCommentRow:
    return TaskCommentRow(
        id=c.id,
        task_id=task_id,
        text=c.text,
        author_id=c.author_id,
        author_name=c.author_name,
        author_role=c.author_role,
        created_at=c.created_at,
    )


def scope_predicate(scope: TaskVisibilityScope) -> ColumnElement[bool]:
    """Translate a visibility scope into a WHERE clause over task."""
    if scope.kind == VisibilityKind.ALL:
        return true()
    own = or_(Task.created_by == scope.actor_id, Task.assigned_to == scope.actor_id)
    if scope.kind == VisibilityKind.OWN:
        return own
    department_users = select(User.id).where(User.department_id == scope.department_id)
    return or_(
        own,
        Task.forwarded_by == scope.actor_id,
        Task.assigned_to.in_(department_users),
        Task.created_by.in_(department_users),
    )


def view_predicate(
    actor_id: str, view: TaskView, scope: TaskVisibilityScope
) -> ColumnElement[bool]:
    """WHERE clause for a named task listing."""
    if view == TaskView.ASSIGNED:
        return and_(Task.assigned_to == actor_id, Task.created_by != actor_id)
    if view == TaskView.CREATED:
        return and_(Task.created_by == actor_id, Task.assigned_to != actor_id)
    if view == TaskView.SELF:
        return and_(Task.created_by == actor_id, Task.assigned_to == actor_id)
    return scope_predicate(scope)


class TaskRepository(AuditableRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    def __init__(
        self,
        db: AsyncSession,
        audit_service: IAuditService | None = None,
    ) -> None:
        super().__init__(db, Task, audit_service)

    def _get_entity_type(self) -> str:
        return "task"

    def _serialize_for_audit(self, obj: Task | TaskEntity) -> dict[str, Any]:
        return {
            "id": obj.id,
            "sno": obj.sno,
            "description": obj.description,
            "created_by": obj.created_by,
            "assigned_to": obj.assigned_to,
            "status": getattr(obj.status, "value", obj.status),
            "approval_status": getattr(obj.approval_status, "value", obj.approval_status),
            "forwarded_by": obj.forwarded_by,
            "current_approver": obj.current_approver,
            "version": obj.version,
        }

    async def next_sno(self) -> int:
        """Increment the task counter row and return the new value.

        The counter row stays locked until the transaction ends, so concurrent
        creators serialize here and a rolled-back creation releases its number.
        """
        stmt = (
            pg_insert(SequenceCounter)
            .values(name=TASK_SNO_COUNTER, value=1)
            .on_conflict_do_update(
                index_elements=[SequenceCounter.name],
                set_={"value": SequenceCounter.value + 1},
            )
            .returning(SequenceCounter.value)
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def add(self, task: TaskEntity) -> TaskEntity:
        row = Task(
            id=task.id,
            sno=task.sno,
            created_by=task.created_by,
            created_by_name=task.created_by_name,
            created_by_contact=task.created_by_contact,
            is_self_task=task.is_self_task,
            task_given_by_contact=task.task_given_by_contact,
            task_given_by_name=task.task_given_by_name,
            version=1,
            **_mutable_columns(task),
        )
        row.comments = [_comment_row(task.id, c) for c in task.pop_new_comments()]
        created = await self.create(row)
        task.version = created.version
        task.created_at = ensure_utc(created.created_at)
        task.updated_at = ensure_utc(created.updated_at)
        return task

    async def get_by_id(self, task_id: str, *, for_update: bool = False) -> TaskEntity | None:
        row = await self.get_row(task_id, for_update=for_update)
        return _task_to_entity(row) if row else None

    async def save(
        self, task: TaskEntity, action: AuditAction = AuditAction.UPDATED
    ) -> TaskEntity:
        expected = task.version
        stmt = (
            update(Task)
            .where(Task.id == task.id, Task.version == expected)
            .values(**_mutable_columns(task), version=expected + 1, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise TaskVersionConflictException(task.id, expected)
        task.version = expected + 1
        for comment in task.pop_new_comments():
            self.db.add(_comment_row(task.id, comment))
        await self.db.flush()
        await self._emit_audit_event(
            action,
            task,  # type: ignore[arg-type]
            metadata={"from_version": expected},
        )
        return task

    async def delete(self, task: TaskEntity) -> None:  # type: ignore[override]
        row = await self.get_row(task.id)
        if row is not None:
            await super().delete(row)

    async def list_for_actor(
        self,
        actor_id: str,
        view: TaskView,
        scope: TaskVisibilityScope,
        skip: int = 0,
        limit: int = 100,
    ) -> list[TaskEntity]:
        result = await self.db.execute(
            select(Task)
            .where(view_predicate(actor_id, view, scope))
            .order_by(Task.created_at.desc(), Task.sno.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_task_to_entity(row) for row in result.scalars().all()]

    async def list_pending_approvals(self, approver_id: str) -> list[TaskEntity]:
        result = await self.db.execute(
            select(Task)
            .where(
                Task.status == TaskStatus.WAITING_FOR_APPROVAL.value,
                or_(
                    Task.current_approver == approver_id,
                    and_(
                        Task.current_approver.is_(None),
                        Task.created_by == approver_id,
                    ),
                ),
            )
            .order_by(Task.updated_at.desc())
        )
        return [_task_to_entity(row) for row in result.scalars().all()]

    async def list_open(self) -> list[TaskEntity]:
        result = await self.db.execute(
            select(Task)
            .where(Task.status.in_(_OPEN_STATUSES))
            .order_by(Task.due_date.asc())
        )
        return [_task_to_entity(row) for row in result.scalars().all()]
