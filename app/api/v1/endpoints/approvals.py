"""Approval API: the caller's approval queue, approve and reject."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import CurrentActor, get_task_workflow_service
from app.application.use_cases.tasks import TaskWorkflowService
from app.core.limiter import limit_writes
from app.schemas.task import ApproveRequest, RejectRequest, TaskResponse

router = APIRouter()

Workflow = Annotated[TaskWorkflowService, Depends(get_task_workflow_service)]


@router.get("", response_model=list[TaskResponse])
async def list_pending_approvals(actor: CurrentActor, workflow: Workflow) -> list[TaskResponse]:
    """Tasks waiting for the caller's approval (as forwarder or creator)."""
    tasks = await workflow.list_pending_approvals(actor)
    return [TaskResponse.from_entity(t) for t in tasks]


@router.post("/{task_id}/approve", response_model=TaskResponse)
@limit_writes
async def approve_task(
    request: Request,
    task_id: str,
    actor: CurrentActor,
    workflow: Workflow,
    body: ApproveRequest | None = None,
) -> TaskResponse:
    """Forwarder approval hands the task to the creator; final approval completes it."""
    comments = body.comments if body else None
    return TaskResponse.from_entity(await workflow.approve(actor, task_id, comments))


@router.post("/{task_id}/reject", response_model=TaskResponse)
@limit_writes
async def reject_task(
    request: Request,
    task_id: str,
    actor: CurrentActor,
    workflow: Workflow,
    body: RejectRequest | None = None,
) -> TaskResponse:
    reason = body.reason if body else None
    return TaskResponse.from_entity(await workflow.reject(actor, task_id, reason))
