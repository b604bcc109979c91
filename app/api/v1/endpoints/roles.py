"""Roles API: list, get, create, update, delete. Capability checks happen in RoleService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import CurrentActor, get_role_service
from app.application.dtos.role import RoleCreate, RoleUpdate
from app.application.services.role_service import RoleService
from app.core.limiter import limit_admin_writes
from app.schemas.role import RoleCreateRequest, RoleResponse, RoleUpdateRequest

router = APIRouter()

Roles = Annotated[RoleService, Depends(get_role_service)]


@router.get("", response_model=list[RoleResponse])
async def list_roles(actor: CurrentActor, roles: Roles) -> list[RoleResponse]:
    return [RoleResponse.from_entity(r) for r in await roles.list_roles(actor)]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: str, actor: CurrentActor, roles: Roles) -> RoleResponse:
    return RoleResponse.from_entity(await roles.get_role(actor, role_id))


@router.post("", response_model=RoleResponse, status_code=201)
@limit_admin_writes
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    actor: CurrentActor,
    roles: Roles,
) -> RoleResponse:
    data = RoleCreate(
        name=body.name,
        display_name=body.display_name,
        level=body.level,
        description=body.description,
        permissions=body.permissions,
        managed_role_ids=body.managed_roles,
    )
    return RoleResponse.from_entity(await roles.create_role(actor, data))


@router.put("/{role_id}", response_model=RoleResponse)
@limit_admin_writes
async def update_role(
    request: Request,
    role_id: str,
    body: RoleUpdateRequest,
    actor: CurrentActor,
    roles: Roles,
) -> RoleResponse:
    data = RoleUpdate(
        display_name=body.display_name,
        level=body.level,
        description=body.description,
        permissions=body.permissions,
        managed_role_ids=body.managed_roles,
    )
    return RoleResponse.from_entity(await roles.update_role(actor, role_id, data))


@router.delete("/{role_id}", status_code=204)
@limit_admin_writes
async def delete_role(
    request: Request,
    role_id: str,
    actor: CurrentActor,
    roles: Roles,
) -> Response:
    """409 while any user still holds the role."""
    await roles.delete_role(actor, role_id)
    return Response(status_code=204)
