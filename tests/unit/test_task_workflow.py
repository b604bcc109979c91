"""TaskWorkflowService end to end over in-memory repositories."""

import asyncio

import pytest

from app.application.dtos.task import TaskCreate, TaskUpdate
from app.application.services.authorization_service import AuthorizationService
from app.application.use_cases.tasks import TaskWorkflowService
from app.application.use_cases.tasks.task_workflow import audit_action_for
from app.domain.entities.task import TaskEvent
from app.domain.entities.user import Actor
from app.domain.enums import ApprovalStatus, DurationUnit, TaskPriority, TaskStatus, TaskView
from app.domain.exceptions import (
    AlreadyInTargetStateException,
    AuthorizationException,
    InvalidStateTransitionException,
    ResourceNotFoundException,
    TaskVersionConflictException,
    ValidationException,
)
from app.shared.enums import AuditAction, TaskEventKind
from tests.fakes import NOW, InMemoryTaskRepository, Org, RecordingNotifier, build_org


def _create(assigned_to: str | None, **kwargs) -> TaskCreate:
    return TaskCreate(
        description=kwargs.pop("description", "Audit the cold room"),
        duration_value=kwargs.pop("duration_value", 2),
        duration_unit=kwargs.pop("duration_unit", DurationUnit.DAYS),
        assigned_to=assigned_to,
        **kwargs,
    )


async def test_create_allocates_sequential_sno_and_notifies(
    org: Org, workflow: TaskWorkflowService, notifier: RecordingNotifier
) -> None:
    first = await workflow.create_task(org.actor("head"), _create("u-x"))
    second = await workflow.create_task(org.actor("head"), _create(None, is_self_task=True))
    assert (first.sno, second.sno) == (1, 2)
    assert first.due_date.day == NOW.day + 2
    assert first.version == 1
    assert notifier.events[0] == (TaskEventKind.ASSIGNED, first.id, ("u-x",), None)


async def test_create_by_contact_and_priority(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(
        org.actor("head"), _create("+15550001111", priority=TaskPriority.HIGH)
    )
    assert task.assigned_to == "u-y"
    assert task.priority == TaskPriority.HIGH


async def test_scenario_a_staff_cannot_assign_to_general_manager(
    org: Org, workflow: TaskWorkflowService, notifier: RecordingNotifier
) -> None:
    with pytest.raises(AuthorizationException):
        await workflow.create_task(org.actor("x"), _create("u-gm"))
    assert org.tasks.tasks == {}
    assert notifier.events == []


async def test_static_actor_assigns_anyone(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("admin"), _create("u-gm"))
    assert task.assigned_to == "u-gm"


async def test_self_task_ignores_assignee(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("x"), _create(None, is_self_task=True))
    assert task.assigned_to == "u-x"
    assert task.is_self_task is True


async def test_create_requires_capability(org: Org, workflow: TaskWorkflowService) -> None:
    with pytest.raises(AuthorizationException):
        await workflow.create_task(_viewer(org), _create("u-x"))


def _viewer(org: Org) -> Actor:
    return Actor(user=org.user("z"), role=org.roles.roles["role-viewer"])


@pytest.mark.parametrize(
    ("data", "error"),
    [
        (_create("u-x", description="  "), ValidationException),
        (_create(None), ValidationException),
        (_create("u-x", duration_value=0), ValidationException),
        (_create("nobody@corp.test"), ResourceNotFoundException),
        (_create("u-off"), ValidationException),
    ],
)
async def test_create_validation(
    org: Org, workflow: TaskWorkflowService, data: TaskCreate, error: type
) -> None:
    with pytest.raises(error):
        await workflow.create_task(org.actor("head"), data)


async def test_task_giver_resolved_from_contact(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(
        org.actor("head"), _create("u-x", task_given_by="gm@corp.test")
    )
    assert task.task_given_by_contact == "gm@corp.test"
    assert task.task_given_by_name == "Grace GM"


async def test_scenario_b_direct_approval(
    org: Org, workflow: TaskWorkflowService, notifier: RecordingNotifier
) -> None:
    head, x = org.actor("head"), org.actor("x")
    task = await workflow.create_task(head, _create("u-x"))
    await workflow.update_status(x, task.id, TaskStatus.WAITING_FOR_APPROVAL)
    assert [t.id for t in await workflow.list_pending_approvals(head)] == [task.id]

    done = await workflow.approve(head, task.id)
    assert done.status == TaskStatus.COMPLETED
    assert done.approval_status == ApprovalStatus.APPROVED
    assert done.approved_by == "u-head"
    assert done.version == 3
    assert notifier.kinds() == [
        TaskEventKind.ASSIGNED,
        TaskEventKind.STATUS_CHANGED,
        TaskEventKind.APPROVED,
    ]


async def test_scenario_c_forward_then_two_stage_approval(
    org: Org, workflow: TaskWorkflowService, notifier: RecordingNotifier
) -> None:
    head, x, y = org.actor("head"), org.actor("x"), org.actor("y")
    task = await workflow.create_task(head, _create("u-x"))
    await workflow.forward(x, task.id, "u-y")
    waiting = await workflow.update_status(y, task.id, "Waiting for Approval")
    assert waiting.current_approver == "u-x"
    assert [t.id for t in await workflow.list_pending_approvals(x)] == [task.id]
    assert await workflow.list_pending_approvals(head) == []

    handed = await workflow.approve(x, task.id, comments="Checked")
    assert handed.forwarder_approved is True
    assert handed.current_approver == "u-head"
    assert handed.status == TaskStatus.WAITING_FOR_APPROVAL
    assert "Checked" in org.tasks.tasks[task.id].comments[-1].text

    done = await workflow.approve(head, task.id)
    assert done.status == TaskStatus.COMPLETED
    assert TaskEventKind.HANDED_TO_CREATOR in notifier.kinds()
    assert notifier.events[-1][2] == ("u-y", "u-x")


@pytest.mark.parametrize("actor_key", ["x", "head", "gm", "admin"])
async def test_scenario_d_completed_rejected_for_every_role(
    org: Org, workflow: TaskWorkflowService, actor_key: str
) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    with pytest.raises(InvalidStateTransitionException):
        await workflow.update_status(org.actor(actor_key), task.id, "Completed")
    assert org.tasks.tasks[task.id].status == TaskStatus.PENDING


async def test_scenario_e_concurrent_approvals() -> None:
    org = build_org(yield_on_load=True)
    notifier = RecordingNotifier()
    workflow = TaskWorkflowService(
        org.tasks, org.users, AuthorizationService(org.roles), notifier, clock=lambda: NOW
    )
    head = org.actor("head")
    task = await workflow.create_task(head, _create("u-x"))
    await workflow.update_status(org.actor("x"), task.id, TaskStatus.WAITING_FOR_APPROVAL)

    results = await asyncio.gather(
        workflow.approve(head, task.id),
        workflow.approve(head, task.id),
        return_exceptions=True,
    )
    completed = [r for r in results if not isinstance(r, Exception)]
    errors = [r for r in results if isinstance(r, Exception)]
    assert len(completed) == 1 and completed[0].status == TaskStatus.COMPLETED
    assert len(errors) == 1 and isinstance(errors[0], AlreadyInTargetStateException)
    assert org.tasks.conflicts == 1
    assert notifier.kinds().count(TaskEventKind.APPROVED) == 1


async def test_version_conflict_surfaces_after_max_attempts(
    org: Org, authorization: AuthorizationService, notifier: RecordingNotifier
) -> None:
    class AlwaysStale(InMemoryTaskRepository):
        async def save(self, task, action=AuditAction.UPDATED):
            raise TaskVersionConflictException(task.id, task.version)

    tasks = AlwaysStale(org.users)
    workflow = TaskWorkflowService(
        tasks, org.users, authorization, notifier, clock=lambda: NOW, max_attempts=2
    )
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    with pytest.raises(TaskVersionConflictException):
        await workflow.update_status(org.actor("x"), task.id, TaskStatus.IN_PROGRESS)
    assert notifier.kinds() == [TaskEventKind.ASSIGNED]


async def test_reject_round_trip(org: Org, workflow: TaskWorkflowService) -> None:
    head, x = org.actor("head"), org.actor("x")
    task = await workflow.create_task(head, _create("u-x"))
    await workflow.update_status(x, task.id, TaskStatus.WAITING_FOR_APPROVAL)
    rejected = await workflow.reject(head, task.id, "Missing numbers")
    assert rejected.status == TaskStatus.IN_PROGRESS
    assert rejected.approval_status == ApprovalStatus.REJECTED
    assert rejected.current_approver is None
    assert rejected.approval_comments == "Missing numbers"


async def test_forward_guards(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    with pytest.raises(AuthorizationException):
        await workflow.forward(org.actor("y"), task.id, "u-z")
    with pytest.raises(AuthorizationException):
        await workflow.forward(org.actor("x"), task.id, "u-gm")
    with pytest.raises(ResourceNotFoundException):
        await workflow.forward(org.actor("x"), "missing", "u-y")


async def test_notification_failure_does_not_fail_transition(
    org: Org, authorization: AuthorizationService
) -> None:
    workflow = TaskWorkflowService(
        org.tasks, org.users, authorization, RecordingNotifier(fail=True), clock=lambda: NOW
    )
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    moved = await workflow.update_status(org.actor("x"), task.id, TaskStatus.IN_PROGRESS)
    assert moved.status == TaskStatus.IN_PROGRESS


async def test_update_task_edits_and_reassigns(
    org: Org, workflow: TaskWorkflowService, notifier: RecordingNotifier
) -> None:
    head = org.actor("head")
    task = await workflow.create_task(head, _create("u-x"))
    updated = await workflow.update_task(
        head, task.id, TaskUpdate(notes="Use the new template", assigned_to="u-y")
    )
    assert updated.notes == "Use the new template"
    assert updated.assigned_to == "u-y"
    assert updated.is_forwarded is False
    assert notifier.events[-1][2] == ("u-y",)


async def test_update_task_by_assignee_is_a_forward(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    updated = await workflow.update_task(org.actor("x"), task.id, TaskUpdate(assigned_to="u-y"))
    assert updated.is_forwarded is True
    assert updated.forwarded_by == "u-x"


async def test_update_task_guards(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    with pytest.raises(ValidationException):
        await workflow.update_task(org.actor("head"), task.id, TaskUpdate())
    with pytest.raises(AuthorizationException):
        await workflow.update_task(org.actor("x"), task.id, TaskUpdate(notes="mine now"))


async def test_comments(org: Org, workflow: TaskWorkflowService, notifier: RecordingNotifier) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    comment = await workflow.add_comment(org.actor("x"), task.id, "On it")
    assert comment.author_role == "Staff"
    assert org.tasks.tasks[task.id].comments[-1].text == "On it"
    assert notifier.events[-1][:3] == (TaskEventKind.COMMENTED, task.id, ("u-head",))
    with pytest.raises(AuthorizationException):
        await workflow.add_comment(org.actor("z"), task.id, "Hello?")


async def test_delete_task(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    with pytest.raises(AuthorizationException):
        await workflow.delete_task(org.actor("x"), task.id)
    await workflow.delete_task(org.actor("head"), task.id)
    assert task.id not in org.tasks.tasks


async def test_get_task_outside_scope_is_not_found(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("head"), _create("u-x"))
    assert (await workflow.get_task(org.actor("x"), task.id)).id == task.id
    with pytest.raises(ResourceNotFoundException):
        await workflow.get_task(org.actor("z"), task.id)


async def test_department_head_sees_department_tasks(org: Org, workflow: TaskWorkflowService) -> None:
    task = await workflow.create_task(org.actor("x"), _create("u-y"))
    assert (await workflow.get_task(org.actor("head"), task.id)).id == task.id
    visible = await workflow.list_visible_tasks(org.actor("head"), "all")
    assert [t.id for t in visible] == [task.id]


async def test_list_views(org: Org, workflow: TaskWorkflowService) -> None:
    head, x = org.actor("head"), org.actor("x")
    given = await workflow.create_task(head, _create("u-x"))
    own = await workflow.create_task(x, _create(None, is_self_task=True))
    assert [t.id for t in await workflow.list_visible_tasks(x, TaskView.ASSIGNED)] == [given.id]
    assert [t.id for t in await workflow.list_visible_tasks(x, "self")] == [own.id]
    assert [t.id for t in await workflow.list_visible_tasks(head, "created")] == [given.id]
    assert {t.id for t in await workflow.list_visible_tasks(x, "all")} == {given.id, own.id}
    with pytest.raises(ValidationException):
        await workflow.list_visible_tasks(x, "everything")


async def test_saves_are_audited_with_the_transition_kind(
    org: Org, workflow: TaskWorkflowService
) -> None:
    head, x, y = org.actor("head"), org.actor("x"), org.actor("y")
    task = await workflow.create_task(head, _create("u-x"))
    await workflow.forward(x, task.id, "u-y")
    await workflow.update_status(y, task.id, TaskStatus.WAITING_FOR_APPROVAL)
    await workflow.approve(x, task.id)
    await workflow.reject(head, task.id, "Redo the count")
    await workflow.add_comment(head, task.id, "See attached sheet")
    await workflow.update_task(head, task.id, TaskUpdate(notes="Bay 3 only"))

    assert org.tasks.audit_actions == [
        AuditAction.FORWARDED,
        AuditAction.STATUS_CHANGED,
        AuditAction.APPROVED,
        AuditAction.REJECTED,
        AuditAction.UPDATED,
        AuditAction.UPDATED,
    ]


def test_audit_action_takes_first_mapped_event() -> None:
    events = [
        TaskEvent(TaskEventKind.COMMENTED, ("u-x",)),
        TaskEvent(TaskEventKind.ASSIGNED, ("u-y",)),
        TaskEvent(TaskEventKind.FORWARDED, ("u-y",)),
    ]
    assert audit_action_for(events) == AuditAction.ASSIGNED
    assert audit_action_for([]) == AuditAction.UPDATED
