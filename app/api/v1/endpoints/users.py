"""Users API: provisioning, the current user, grantable roles and assignees."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import CurrentActor, get_user_service
from app.application.dtos.user import UserCreate
from app.application.services.user_service import UserService
from app.core.limiter import limit_admin_writes
from app.schemas.role import RoleResponse
from app.schemas.user import UserCreateRequest, UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(actor: CurrentActor) -> UserResponse:
    return UserResponse.from_entity(actor.user)


@router.get("/available-roles", response_model=list[RoleResponse])
async def list_available_roles(
    actor: CurrentActor,
    users: Annotated[UserService, Depends(get_user_service)],
) -> list[RoleResponse]:
    """Roles the caller may grant when creating a user."""
    return [RoleResponse.from_entity(r) for r in await users.list_grantable_roles(actor)]


@router.get("/for-tasks", response_model=list[UserResponse])
async def list_users_for_tasks(
    actor: CurrentActor,
    users: Annotated[UserService, Depends(get_user_service)],
) -> list[UserResponse]:
    """Active users the caller may assign a task to."""
    return [UserResponse.from_entity(u) for u in await users.list_assignable_users(actor)]


@router.post("", response_model=UserResponse, status_code=201)
@limit_admin_writes
async def create_user(
    request: Request,
    body: UserCreateRequest,
    actor: CurrentActor,
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Create a user holding a role the caller's role may manage."""
    data = UserCreate(
        name=body.name,
        password=body.password,
        role_id=body.role_id,
        email=str(body.email) if body.email else None,
        whatsapp=body.whatsapp,
        designation=body.designation,
        department_id=body.department_id,
    )
    return UserResponse.from_entity(await users.create_user(actor, data))
