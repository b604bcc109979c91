"""Role API schemas."""

from pydantic import BaseModel, Field

from app.domain.entities.role import RoleEntity, capabilities_to_bag


class RoleCreateRequest(BaseModel):
    """Request body for creating a role. Unknown permission names are rejected."""

    name: str = Field(..., min_length=2, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    level: int = Field(default=1, ge=0, le=100)
    description: str | None = Field(default=None, max_length=500)
    permissions: dict[str, bool] = Field(default_factory=dict)
    managed_roles: list[str] = Field(default_factory=list, max_length=100)


class RoleUpdateRequest(BaseModel):
    """Request body for updating a role (partial). permissions are merged."""

    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    level: int | None = Field(default=None, ge=0, le=100)
    description: str | None = Field(default=None, max_length=500)
    permissions: dict[str, bool] | None = None
    managed_roles: list[str] | None = Field(default=None, max_length=100)


class RoleResponse(BaseModel):
    """Role list/detail response with the full permission bag."""

    id: str
    name: str
    display_name: str
    level: int
    description: str | None
    permissions: dict[str, bool]
    managed_roles: list[str]
    is_system: bool
    is_static: bool

    @classmethod
    def from_entity(cls, role: RoleEntity) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            display_name=role.display_name,
            level=role.level,
            description=role.description,
            permissions=capabilities_to_bag(role.capabilities),
            managed_roles=sorted(role.managed_role_ids),
            is_system=role.is_system,
            is_static=role.is_static,
        )
