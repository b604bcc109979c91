"""Task domain entity and lifecycle state machine.

Holds the task record and every transition rule, including the two-stage
forward/approve sub-flow. Capability and role-hierarchy guards live in
app.domain.authorization; this module only enforces identity guards that
depend on the task itself (assignee, creator, forwarder, current approver).

Each transition returns a TaskEvent naming the users to notify. The
orchestrator persists the task and hands the event to the notifier.
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.entities.user import UserEntity
from app.domain.enums import ApprovalStatus, TaskPriority, TaskStatus
from app.domain.exceptions import (
    AlreadyInTargetStateException,
    AuthorizationException,
    InvalidStateTransitionException,
    ValidationException,
)
from app.domain.value_objects.core import Duration
from app.shared.enums import TaskEventKind
from app.shared.utils.datetime import ensure_utc
from app.shared.utils.generators import generate_cuid

# Status updates an assignee may request. COMPLETED only via final approval.
ALLOWED_STATUS_UPDATES: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset(
        {TaskStatus.IN_PROGRESS, TaskStatus.WAITING_FOR_APPROVAL}
    ),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.PENDING, TaskStatus.WAITING_FOR_APPROVAL}
    ),
    TaskStatus.WAITING_FOR_APPROVAL: frozenset(
        {TaskStatus.PENDING, TaskStatus.IN_PROGRESS}
    ),
    TaskStatus.COMPLETED: frozenset(),
}

DEFAULT_REJECTION_REASON = "No reason provided"


def parse_status(value: TaskStatus | str) -> TaskStatus:
    """Return the TaskStatus for value. Raises ValidationException when unknown."""
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationException(
            f"Unknown status '{value}'. Expected one of {TaskStatus.values()}",
            field="status",
        ) from None


@dataclass(frozen=True)
class TaskComment:
    """Append-only comment on a task."""

    id: str
    text: str
    author_id: str | None
    author_name: str
    author_role: str | None
    created_at: datetime


@dataclass(frozen=True)
class TaskEvent:
    """Lifecycle event produced by a transition; recipients are user ids."""

    kind: TaskEventKind
    recipients: tuple[str, ...]
    actor_id: str | None = None
    note: str | None = None


def _recipients(*user_ids: str | None) -> tuple[str, ...]:
    """Drop empty ids and duplicates, keeping order."""
    seen: list[str] = []
    for user_id in user_ids:
        if user_id and user_id not in seen:
            seen.append(user_id)
    return tuple(seen)


@dataclass
class TaskEntity:
    """Domain entity for a task (SRP: lifecycle rules separate from persistence).

    version is the optimistic-concurrency counter; repositories bump it on
    every save and refuse to overwrite a newer row.
    """

    id: str
    sno: int
    description: str
    created_by: str
    created_by_name: str
    created_by_contact: str
    assigned_to: str
    assigned_to_name: str
    assigned_to_contact: str
    due_date: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    notes: str | None = None
    is_self_task: bool = False
    task_given_by_contact: str | None = None
    task_given_by_name: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by: str | None = None
    approved_at: datetime | None = None
    approval_comments: str | None = None
    is_forwarded: bool = False
    forwarded_by: str | None = None
    forwarded_at: datetime | None = None
    forwarder_approved: bool = False
    current_approver: str | None = None
    comments: list[TaskComment] = field(default_factory=list)
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    _new_comments: list[TaskComment] = field(
        default_factory=list, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate task business rules. Raises ValidationException if invalid."""
        if not self.description or not self.description.strip():
            raise ValidationException("Task description is required", field="description")
        if not self.created_by:
            raise ValidationException("Task creator is required", field="created_by")
        if not self.assigned_to:
            raise ValidationException("Task assignee is required", field="assigned_to")
        if self.status == TaskStatus.COMPLETED and (
            self.approval_status != ApprovalStatus.APPROVED or not self.approved_by
        ):
            raise ValidationException(
                "A completed task must carry an approval", field="status"
            )

    @classmethod
    def create(
        cls,
        *,
        sno: int,
        description: str,
        creator: UserEntity,
        assignee: UserEntity,
        duration: Duration,
        now: datetime,
        priority: TaskPriority = TaskPriority.MEDIUM,
        notes: str | None = None,
        is_self_task: bool = False,
        task_given_by_contact: str | None = None,
        task_given_by_name: str | None = None,
    ) -> "TaskEntity":
        """Build a new Pending task due at now + duration."""
        return cls(
            id=generate_cuid(),
            sno=sno,
            description=description.strip() if description else description,
            created_by=creator.id,
            created_by_name=creator.name,
            created_by_contact=creator.contact,
            assigned_to=assignee.id,
            assigned_to_name=assignee.name,
            assigned_to_contact=assignee.contact,
            due_date=now + duration.as_timedelta(),
            priority=priority,
            notes=notes,
            is_self_task=is_self_task,
            task_given_by_contact=task_given_by_contact,
            task_given_by_name=task_given_by_name,
            created_at=now,
            updated_at=now,
        )

    # ---- queries ----

    def is_assignee(self, user_id: str) -> bool:
        return self.assigned_to == user_id

    def is_creator(self, user_id: str) -> bool:
        return self.created_by == user_id

    def is_forwarder(self, user_id: str) -> bool:
        return self.is_forwarded and self.forwarded_by == user_id

    def needs_forwarder_approval(self) -> bool:
        """True while a forwarder other than the creator still has to approve."""
        return (
            self.is_forwarded
            and not self.forwarder_approved
            and self.forwarded_by is not None
            and self.forwarded_by != self.created_by
        )

    def is_overdue(self, now: datetime) -> bool:
        return self.status != TaskStatus.COMPLETED and self.due_date < now

    def awaiting_approval_from(self) -> str | None:
        """Return who must approve next, or None when not Waiting for Approval."""
        if self.status != TaskStatus.WAITING_FOR_APPROVAL:
            return None
        return self.current_approver or self.created_by

    def assigned_event(self) -> TaskEvent:
        """Event announcing the task to its first assignee."""
        return TaskEvent(
            TaskEventKind.ASSIGNED,
            _recipients(self.assigned_to),
            actor_id=self.created_by,
        )

    def pop_new_comments(self) -> list[TaskComment]:
        """Return comments appended since load and forget them."""
        pending, self._new_comments = self._new_comments, []
        return pending

    # ---- transitions ----

    def _reset_approval(self) -> None:
        self.approval_status = ApprovalStatus.PENDING
        self.approved_by = None
        self.approved_at = None
        self.current_approver = None
        self.forwarder_approved = False

    def update_status(
        self, actor_id: str, requested: TaskStatus | str, now: datetime
    ) -> TaskEvent:
        """Apply an assignee status update.

        Raises:
            ValidationException: Unknown status value.
            InvalidStateTransitionException: Completed requested, or not allowed from the current status.
            AuthorizationException: Actor is not the current assignee.
            AlreadyInTargetStateException: Task already has the requested status.
        """
        target = parse_status(requested)
        if target == TaskStatus.COMPLETED:
            raise InvalidStateTransitionException(
                self.status.value,
                target.value,
                "Tasks can only be completed through approval",
            )
        if not self.is_assignee(actor_id):
            raise AuthorizationException(
                message="Only the current assignee can update task status",
                resource="task",
                action="update_status",
            )
        if target == self.status:
            raise AlreadyInTargetStateException(target.value)
        if target not in ALLOWED_STATUS_UPDATES[self.status]:
            raise InvalidStateTransitionException(self.status.value, target.value)

        self.status = target
        self.updated_at = now
        if target == TaskStatus.WAITING_FOR_APPROVAL:
            self.approval_status = ApprovalStatus.PENDING
            self.approved_by = None
            self.approved_at = None
            if self.needs_forwarder_approval():
                self.current_approver = self.forwarded_by
            else:
                self.current_approver = self.created_by
            return TaskEvent(
                TaskEventKind.STATUS_CHANGED,
                _recipients(self.created_by, self.current_approver),
                actor_id=actor_id,
                note=target.value,
            )
        self._reset_approval()
        return TaskEvent(
            TaskEventKind.STATUS_CHANGED,
            _recipients(self.created_by),
            actor_id=actor_id,
            note=target.value,
        )

    def approve(
        self,
        actor_id: str,
        actor_name: str,
        now: datetime,
        comments: str | None = None,
    ) -> TaskEvent:
        """Approve the task: intermediate (forwarder) or final (current approver).

        Raises:
            AlreadyInTargetStateException: Task is already approved.
            InvalidStateTransitionException: Task is not waiting for approval.
            AuthorizationException: Actor is not the one whose approval is pending.
        """
        if self.approval_status == ApprovalStatus.APPROVED:
            raise AlreadyInTargetStateException(ApprovalStatus.APPROVED.value)
        if self.status != TaskStatus.WAITING_FOR_APPROVAL:
            raise InvalidStateTransitionException(
                self.status.value,
                TaskStatus.COMPLETED.value,
                "Only tasks waiting for approval can be approved",
            )

        if self.needs_forwarder_approval() and self.is_forwarder(actor_id):
            self.forwarder_approved = True
            self.current_approver = self.created_by
            self.updated_at = now
            note = (
                f"Approved by {actor_name}; awaiting final approval from "
                f"{self.created_by_name}"
            )
            if comments:
                note = f"{note}. {comments}"
            self._append_comment(
                text=note,
                author_id=actor_id,
                author_name=actor_name,
                author_role="system",
                now=now,
            )
            return TaskEvent(
                TaskEventKind.HANDED_TO_CREATOR,
                _recipients(self.created_by, self.assigned_to),
                actor_id=actor_id,
                note=comments,
            )

        if actor_id != (self.current_approver or self.created_by):
            raise AuthorizationException(
                message="You are not the current approver of this task",
                resource="task",
                action="approve",
            )

        self.status = TaskStatus.COMPLETED
        self.approval_status = ApprovalStatus.APPROVED
        self.approved_by = actor_id
        self.approved_at = now
        self.current_approver = None
        if comments:
            self.approval_comments = comments
        self.updated_at = now
        return TaskEvent(
            TaskEventKind.APPROVED,
            _recipients(
                self.assigned_to,
                self.forwarded_by if self.is_forwarded else None,
            ),
            actor_id=actor_id,
            note=comments,
        )

    def reject(self, actor_id: str, now: datetime, reason: str | None = None) -> TaskEvent:
        """Send the task back to the assignee (In Progress, Rejected).

        Raises:
            InvalidStateTransitionException: Task is not waiting for approval.
            AuthorizationException: Actor is neither the creator nor a forwarder still due to approve.
        """
        if self.status != TaskStatus.WAITING_FOR_APPROVAL:
            raise InvalidStateTransitionException(
                self.status.value,
                TaskStatus.IN_PROGRESS.value,
                "Only tasks waiting for approval can be rejected",
            )
        by_creator = self.is_creator(actor_id)
        by_forwarder = self.is_forwarder(actor_id) and self.needs_forwarder_approval()
        if not (by_creator or by_forwarder):
            raise AuthorizationException(
                message="Only the task creator or the pending forwarder can reject",
                resource="task",
                action="reject",
            )

        self.status = TaskStatus.IN_PROGRESS
        self.approval_status = ApprovalStatus.REJECTED
        self.approved_by = None
        self.approved_at = None
        self.current_approver = None
        self.forwarder_approved = False
        self.approval_comments = (reason or "").strip() or DEFAULT_REJECTION_REASON
        self.updated_at = now
        notify_forwarder = by_creator and self.is_forwarded and not by_forwarder
        return TaskEvent(
            TaskEventKind.REJECTED,
            _recipients(
                self.assigned_to,
                self.forwarded_by if notify_forwarder else None,
            ),
            actor_id=actor_id,
            note=self.approval_comments,
        )

    def _ensure_reassignable(self, new_assignee: UserEntity, action: str) -> None:
        if not self.status.is_open:
            raise InvalidStateTransitionException(
                self.status.value,
                self.status.value,
                f"Cannot {action} a task that is '{self.status.value}'",
            )
        if new_assignee.id == self.assigned_to:
            raise ValidationException(
                "Task is already assigned to this user", field="assigned_to"
            )

    def _assign(self, new_assignee: UserEntity) -> None:
        self.assigned_to = new_assignee.id
        self.assigned_to_name = new_assignee.name
        self.assigned_to_contact = new_assignee.contact

    def forward(self, actor_id: str, new_assignee: UserEntity, now: datetime) -> TaskEvent:
        """Current assignee hands the task to someone else, becoming its forwarder.

        The first forwarder is kept for the approval chain; later forwards only
        move the assignee and restart the forwarder approval.
        """
        if not self.is_assignee(actor_id):
            raise AuthorizationException(
                message="Only the current assignee can forward a task",
                resource="task",
                action="forward",
            )
        self._ensure_reassignable(new_assignee, "forward")
        if not self.is_forwarded:
            self.is_forwarded = True
            self.forwarded_by = actor_id
        self.forwarded_at = now
        self.forwarder_approved = False
        self._assign(new_assignee)
        self.updated_at = now
        return TaskEvent(
            TaskEventKind.FORWARDED,
            _recipients(new_assignee.id, self.created_by),
            actor_id=actor_id,
        )

    def reassign(self, actor_id: str, new_assignee: UserEntity, now: datetime) -> TaskEvent:
        """Editor moves the task to another assignee without forwarding semantics."""
        self._ensure_reassignable(new_assignee, "reassign")
        self._assign(new_assignee)
        self.updated_at = now
        return TaskEvent(
            TaskEventKind.ASSIGNED,
            _recipients(new_assignee.id),
            actor_id=actor_id,
        )

    def edit_details(
        self,
        now: datetime,
        *,
        description: str | None = None,
        priority: TaskPriority | None = None,
        notes: str | None = None,
        due_date: datetime | None = None,
    ) -> None:
        """Change descriptive fields. Completed tasks are frozen.

        due_date is stored as aware UTC whatever the caller sent.
        """
        if self.status == TaskStatus.COMPLETED:
            raise InvalidStateTransitionException(
                self.status.value,
                self.status.value,
                "Completed tasks cannot be edited",
            )
        if description is not None:
            if not description.strip():
                raise ValidationException("Task description is required", field="description")
            self.description = description.strip()
        if priority is not None:
            self.priority = priority
        if notes is not None:
            self.notes = notes
        if due_date is not None:
            # Naive values from clients are taken as UTC.
            self.due_date = ensure_utc(due_date)
        self.updated_at = now

    def _append_comment(
        self,
        *,
        text: str,
        author_id: str | None,
        author_name: str,
        author_role: str | None,
        now: datetime,
    ) -> TaskComment:
        comment = TaskComment(
            id=generate_cuid(),
            text=text,
            author_id=author_id,
            author_name=author_name,
            author_role=author_role,
            created_at=now,
        )
        self.comments.append(comment)
        self._new_comments.append(comment)
        return comment

    def add_comment(
        self,
        *,
        text: str,
        author_id: str,
        author_name: str,
        author_role: str | None,
        now: datetime,
    ) -> TaskComment:
        """Append a comment. Allowed in every status, including Completed."""
        if not text or not text.strip():
            raise ValidationException("Comment text is required", field="text")
        comment = self._append_comment(
            text=text.strip(),
            author_id=author_id,
            author_name=author_name,
            author_role=author_role,
            now=now,
        )
        self.updated_at = now
        return comment
