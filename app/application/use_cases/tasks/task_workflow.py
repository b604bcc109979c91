"""Task workflow orchestrator: actor + action + task -> guarded, persisted transition.

Every mutating operation is a read-modify-write on one task guarded by the
task version. On a version conflict the task is reloaded and the transition
re-applied, so a racing duplicate (e.g. a double-clicked approve) sees the
winner's state and fails with the proper domain error instead of clobbering it.

Lifecycle events are handed to the notifier only after the save succeeded.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from app.application.dtos.task import TaskCreate, TaskUpdate
from app.application.interfaces.repositories import ITaskRepository, IUserRepository
from app.application.interfaces.services import INotificationService
from app.application.services.authorization_service import AuthorizationService
from app.domain.authorization import (
    can_assign_task,
    can_comment_on_task,
    can_delete_task,
    can_edit_task,
    can_forward_task,
    task_visibility_scope,
)
from app.domain.entities.task import TaskComment, TaskEntity, TaskEvent
from app.domain.entities.user import Actor, UserEntity
from app.domain.enums import Capability, TaskStatus, TaskView, VisibilityKind
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    TaskVersionConflictException,
    ValidationException,
)
from app.domain.value_objects.core import Duration
from app.shared.enums import AuditAction, TaskEventKind
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

TransitionFn = Callable[[TaskEntity, datetime], list[TaskEvent]]

_AUDIT_ACTIONS = {
    TaskEventKind.APPROVED: AuditAction.APPROVED,
    TaskEventKind.HANDED_TO_CREATOR: AuditAction.APPROVED,
    TaskEventKind.REJECTED: AuditAction.REJECTED,
    TaskEventKind.FORWARDED: AuditAction.FORWARDED,
    TaskEventKind.ASSIGNED: AuditAction.ASSIGNED,
    TaskEventKind.STATUS_CHANGED: AuditAction.STATUS_CHANGED,
}


def audit_action_for(events: list[TaskEvent]) -> AuditAction:
    """Audit action of a transition: its first lifecycle event that has one, else UPDATED."""
    for event in events:
        action = _AUDIT_ACTIONS.get(event.kind)
        if action is not None:
            return action
    return AuditAction.UPDATED


class TaskWorkflowService:
    """Use cases over the task lifecycle for an already-resolved Actor."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        user_repo: IUserRepository,
        authorization: AuthorizationService,
        notifier: INotificationService,
        *,
        clock: Callable[[], datetime] = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.task_repo = task_repo
        self.user_repo = user_repo
        self.authorization = authorization
        self.notifier = notifier
        self._clock = clock
        self._max_attempts = max(1, max_attempts)

    # ---- helpers ----

    async def _find_user(self, reference: str, field: str) -> UserEntity:
        """Resolve a user id or contact (email / WhatsApp number)."""
        user = await self.user_repo.get_by_id(reference)
        if user is None:
            user = await self.user_repo.find_by_contact(reference)
        if user is None:
            raise ResourceNotFoundException("user", reference)
        if not user.is_active:
            raise ValidationException(f"User {user.name} is not active", field=field)
        return user

    async def _ensure_can_assign(self, actor: Actor, assignee: UserEntity) -> None:
        assignee_role = await self.authorization.resolve_role(assignee.role_id)
        if not can_assign_task(actor, assignee.id, assignee_role):
            raise AuthorizationException(
                message=(
                    f"You cannot assign tasks to users with role "
                    f"'{assignee_role.display_name}'"
                ),
                resource="task",
                action="assign",
            )

    async def _load(self, task_id: str, *, for_update: bool = False) -> TaskEntity:
        task = await self.task_repo.get_by_id(task_id, for_update=for_update)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def _is_visible(self, actor: Actor, task: TaskEntity) -> bool:
        scope = task_visibility_scope(actor)
        if scope.kind != VisibilityKind.DEPARTMENT:
            return scope.permits(task, lambda _user_id: None)
        users = await self.user_repo.get_many([task.assigned_to, task.created_by])
        departments = {user.id: user.department_id for user in users}
        return scope.permits(task, departments.get)

    def _dispatch(self, task: TaskEntity, events: list[TaskEvent]) -> None:
        for event in events:
            if not event.recipients:
                continue
            try:
                self.notifier.emit(event.kind, task, event.recipients, event.note)
            except Exception:
                logger.exception(
                    "Failed to dispatch %s notification for task %s",
                    event.kind.value,
                    task.id,
                )

    async def _transition(
        self, task_id: str, apply: TransitionFn, operation: str
    ) -> TaskEntity:
        """Load, apply, and save with version check; retry on concurrent writes."""
        for attempt in range(1, self._max_attempts + 1):
            task = await self._load(task_id, for_update=True)
            events = apply(task, self._clock())
            try:
                saved = await self.task_repo.save(task, audit_action_for(events))
            except TaskVersionConflictException:
                if attempt >= self._max_attempts:
                    raise
                logger.info(
                    "Version conflict on task %s during %s (attempt %d); retrying",
                    task_id,
                    operation,
                    attempt,
                )
                continue
            logger.info(
                "Task %s (#%d) %s -> status=%s approval=%s",
                saved.id,
                saved.sno,
                operation,
                saved.status.value,
                saved.approval_status.value,
            )
            self._dispatch(saved, events)
            return saved
        raise TaskVersionConflictException(task_id, -1)

    # ---- queries ----

    @traced("task_workflow.list_visible_tasks")
    async def list_visible_tasks(
        self,
        actor: Actor,
        view: TaskView | str = TaskView.ALL,
        skip: int = 0,
        limit: int = 100,
    ) -> list[TaskEntity]:
        """Return tasks for a named view: assigned, created, self, or all (visibility scope)."""
        try:
            view = TaskView(view)
        except ValueError:
            raise ValidationException(
                f"Unknown view '{view}'. Expected one of {TaskView.values()}",
                field="view",
            ) from None
        scope = task_visibility_scope(actor)
        add_span_attributes(view=view.value, scope=scope.kind.value)
        return await self.task_repo.list_for_actor(actor.id, view, scope, skip, limit)

    @traced("task_workflow.get_task")
    async def get_task(self, actor: Actor, task_id: str) -> TaskEntity:
        """Return the task if inside the actor's visibility scope, else NotFound."""
        task = await self._load(task_id)
        if not await self._is_visible(actor, task):
            raise ResourceNotFoundException("task", task_id)
        return task

    @traced("task_workflow.list_pending_approvals")
    async def list_pending_approvals(self, actor: Actor) -> list[TaskEntity]:
        """Tasks waiting for this actor's approval (as forwarder or creator)."""
        return await self.task_repo.list_pending_approvals(actor.id)

    # ---- commands ----

    @traced("task_workflow.create_task")
    async def create_task(self, actor: Actor, data: TaskCreate) -> TaskEntity:
        """Create a task and notify its assignee.

        Args:
            actor: Creator with resolved role.
            data: Task input; assigned_to is a user id or contact.

        Returns:
            The persisted task with its serial number.

        Raises:
            AuthorizationException: Missing createTasks, or assignee role not manageable.
            ValidationException: Missing description/assignee or bad duration.
            ResourceNotFoundException: Assignee not found.
        """
        self.authorization.require(actor, Capability.CREATE_TASKS, "task", "create")
        if not data.description or not data.description.strip():
            raise ValidationException("Task description is required", field="description")
        duration = Duration(data.duration_value, data.duration_unit)

        if data.is_self_task:
            assignee = actor.user
        else:
            if not data.assigned_to:
                raise ValidationException("Assignee is required", field="assigned_to")
            assignee = await self._find_user(data.assigned_to, "assigned_to")
            await self._ensure_can_assign(actor, assignee)

        given_by_contact = None
        given_by_name = data.task_given_by_name
        if data.task_given_by:
            giver = await self.user_repo.get_by_id(data.task_given_by)
            if giver is None:
                giver = await self.user_repo.find_by_contact(data.task_given_by)
            if giver is not None:
                given_by_contact = giver.contact
                given_by_name = given_by_name or giver.name
            else:
                given_by_contact = data.task_given_by

        sno = await self.task_repo.next_sno()
        task = TaskEntity.create(
            sno=sno,
            description=data.description,
            creator=actor.user,
            assignee=assignee,
            duration=duration,
            now=self._clock(),
            priority=data.priority,
            notes=data.notes,
            is_self_task=data.is_self_task or assignee.id == actor.id,
            task_given_by_contact=given_by_contact,
            task_given_by_name=given_by_name,
        )
        saved = await self.task_repo.add(task)
        logger.info(
            "Task %s (#%d) created by %s for %s", saved.id, saved.sno, actor.id, assignee.id
        )
        self._dispatch(saved, [saved.assigned_event()])
        return saved

    @traced("task_workflow.update_status")
    async def update_status(
        self, actor: Actor, task_id: str, status: TaskStatus | str
    ) -> TaskEntity:
        """Assignee moves the task between Pending, In Progress and Waiting for Approval."""
        return await self._transition(
            task_id,
            lambda task, now: [task.update_status(actor.id, status, now)],
            "update_status",
        )

    @traced("task_workflow.approve")
    async def approve(
        self, actor: Actor, task_id: str, comments: str | None = None
    ) -> TaskEntity:
        """Intermediate approval by the forwarder, or final approval by the current approver."""
        return await self._transition(
            task_id,
            lambda task, now: [task.approve(actor.id, actor.name, now, comments)],
            "approve",
        )

    @traced("task_workflow.reject")
    async def reject(
        self, actor: Actor, task_id: str, reason: str | None = None
    ) -> TaskEntity:
        """Send a waiting task back to In Progress with a rejection reason."""
        return await self._transition(
            task_id,
            lambda task, now: [task.reject(actor.id, now, reason)],
            "reject",
        )

    @traced("task_workflow.forward")
    async def forward(self, actor: Actor, task_id: str, new_assignee: str) -> TaskEntity:
        """Current assignee forwards the task and becomes the first approver in the chain."""
        if not can_forward_task(actor):
            raise AuthorizationException(resource="task", action="forward")
        target = await self._find_user(new_assignee, "assigned_to")
        await self._ensure_can_assign(actor, target)
        return await self._transition(
            task_id,
            lambda task, now: [task.forward(actor.id, target, now)],
            "forward",
        )

    @traced("task_workflow.update_task")
    async def update_task(self, actor: Actor, task_id: str, data: TaskUpdate) -> TaskEntity:
        """Edit details and/or move the task to another assignee.

        A new assignee from the current assignee is a forward; from an editor
        (creator with editOwnTasks, or editAllTasks) it is a plain reassignment.
        """
        if not data.has_detail_changes() and not data.assigned_to:
            raise ValidationException("No changes supplied")
        target = None
        if data.assigned_to:
            target = await self._find_user(data.assigned_to, "assigned_to")
            await self._ensure_can_assign(actor, target)

        def apply(task: TaskEntity, now: datetime) -> list[TaskEvent]:
            events: list[TaskEvent] = []
            if data.has_detail_changes():
                if not can_edit_task(actor, task):
                    raise AuthorizationException(resource="task", action="edit")
                task.edit_details(
                    now,
                    description=data.description,
                    priority=data.priority,
                    notes=data.notes,
                    due_date=data.due_date,
                )
            if target is not None:
                if task.is_assignee(actor.id):
                    if not can_forward_task(actor):
                        raise AuthorizationException(resource="task", action="forward")
                    events.append(task.forward(actor.id, target, now))
                else:
                    if not can_edit_task(actor, task):
                        raise AuthorizationException(resource="task", action="reassign")
                    events.append(task.reassign(actor.id, target, now))
            return events

        return await self._transition(task_id, apply, "update_task")

    @traced("task_workflow.add_comment")
    async def add_comment(self, actor: Actor, task_id: str, text: str) -> TaskComment:
        """Append a comment; allowed in every status for participants and see-all roles."""
        added: list[TaskComment] = []

        def apply(task: TaskEntity, now: datetime) -> list[TaskEvent]:
            if not can_comment_on_task(actor, task):
                raise AuthorizationException(resource="task", action="comment")
            comment = task.add_comment(
                text=text,
                author_id=actor.id,
                author_name=actor.name,
                author_role=actor.role_label,
                now=now,
            )
            added[:] = [comment]
            recipients = tuple(
                user_id
                for user_id in dict.fromkeys((task.created_by, task.assigned_to))
                if user_id != actor.id
            )
            return [
                TaskEvent(TaskEventKind.COMMENTED, recipients, actor_id=actor.id, note=comment.text)
            ]

        await self._transition(task_id, apply, "add_comment")
        return added[0]

    @traced("task_workflow.delete_task")
    async def delete_task(self, actor: Actor, task_id: str) -> None:
        """Permanently delete a task (deleteAllTasks, or creator with deleteOwnTasks)."""
        task = await self._load(task_id, for_update=True)
        if not can_delete_task(actor, task):
            raise AuthorizationException(resource="task", action="delete")
        await self.task_repo.delete(task)
        logger.info("Task %s (#%d) deleted by %s", task.id, task.sno, actor.id)
