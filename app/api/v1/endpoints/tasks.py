"""Task API: create, list, read, status changes, forwarding, edits, comments, delete.

Every route authenticates via get_current_actor; guards live in the workflow
service and surface as domain exceptions (mapped centrally to HTTP).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import CurrentActor, get_task_workflow_service
from app.application.dtos.task import TaskCreate, TaskUpdate
from app.application.use_cases.tasks import TaskWorkflowService
from app.core.limiter import limit_writes
from app.domain.enums import TaskView
from app.schemas.task import (
    CommentCreateRequest,
    CommentResponse,
    TaskCreateRequest,
    TaskForwardRequest,
    TaskResponse,
    TaskStatusRequest,
    TaskUpdateRequest,
)

router = APIRouter()

Workflow = Annotated[TaskWorkflowService, Depends(get_task_workflow_service)]


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    actor: CurrentActor,
    workflow: Workflow,
) -> TaskResponse:
    task = await workflow.create_task(actor, TaskCreate(**body.model_dump()))
    return TaskResponse.from_entity(task)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    actor: CurrentActor,
    workflow: Workflow,
    view: Annotated[str, Query(description=f"One of {TaskView.values()}")] = "all",
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[TaskResponse]:
    """Newest first. view=all applies the caller's visibility scope."""
    tasks = await workflow.list_visible_tasks(actor, view=view, skip=skip, limit=limit)
    return [TaskResponse.from_entity(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, actor: CurrentActor, workflow: Workflow) -> TaskResponse:
    """404 both for missing tasks and for tasks outside the caller's scope."""
    return TaskResponse.from_entity(await workflow.get_task(actor, task_id))


@router.patch("/{task_id}/status", response_model=TaskResponse)
@limit_writes
async def update_status(
    request: Request,
    task_id: str,
    body: TaskStatusRequest,
    actor: CurrentActor,
    workflow: Workflow,
) -> TaskResponse:
    task = await workflow.update_status(actor, task_id, body.status)
    return TaskResponse.from_entity(task)


@router.put("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdateRequest,
    actor: CurrentActor,
    workflow: Workflow,
) -> TaskResponse:
    task = await workflow.update_task(actor, task_id, TaskUpdate(**body.model_dump()))
    return TaskResponse.from_entity(task)


@router.post("/{task_id}/forward", response_model=TaskResponse)
@limit_writes
async def forward_task(
    request: Request,
    task_id: str,
    body: TaskForwardRequest,
    actor: CurrentActor,
    workflow: Workflow,
) -> TaskResponse:
    task = await workflow.forward(actor, task_id, body.assigned_to)
    return TaskResponse.from_entity(task)


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=201)
@limit_writes
async def add_comment(
    request: Request,
    task_id: str,
    body: CommentCreateRequest,
    actor: CurrentActor,
    workflow: Workflow,
) -> CommentResponse:
    comment = await workflow.add_comment(actor, task_id, body.text)
    return CommentResponse.from_entity(comment)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    task_id: str,
    actor: CurrentActor,
    workflow: Workflow,
) -> Response:
    await workflow.delete_task(actor, task_id)
    return Response(status_code=204)
