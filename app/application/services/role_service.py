"""Role application service: create, update and delete roles and their managed-role edges."""

from __future__ import annotations

from app.application.dtos.role import RoleCreate, RoleUpdate
from app.application.interfaces.repositories import IRoleRepository
from app.application.services.authorization_service import AuthorizationService
from app.domain.entities.role import (
    RoleEntity,
    capabilities_from_bag,
    capabilities_to_bag,
)
from app.domain.entities.user import Actor
from app.domain.enums import Capability
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    RoleAlreadyExistsException,
    RoleInUseException,
    ValidationException,
)
from app.domain.value_objects.core import RoleName
from app.shared.telemetry.logging import get_logger
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class RoleService:
    """Role administration honouring isStatic (immutable) and isSystem (built-in) flags."""

    def __init__(
        self,
        role_repo: IRoleRepository,
        authorization: AuthorizationService,
    ) -> None:
        self._role_repo = role_repo
        self._authorization = authorization

    async def _get(self, role_id: str) -> RoleEntity:
        role = await self._role_repo.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException("role", role_id)
        return role

    async def _validate_managed(self, role_ids: list[str]) -> frozenset[str]:
        """Managed roles must exist and must not include the static role.

        A role may list itself (peers assigning to each other).
        """
        wanted = list(dict.fromkeys(role_ids))
        found = {role.id: role for role in await self._role_repo.get_many(wanted)}
        missing = [role_id for role_id in wanted if role_id not in found]
        if missing:
            raise ValidationException(
                f"Unknown managed role(s): {', '.join(missing)}", field="managed_roles"
            )
        if any(role.is_static for role in found.values()):
            raise ValidationException(
                "The static role cannot be managed by another role", field="managed_roles"
            )
        return frozenset(wanted)

    @staticmethod
    def _parse_permissions(bag: dict[str, bool]) -> frozenset[Capability]:
        capabilities, unknown = capabilities_from_bag(bag)
        if unknown:
            raise ValidationException(
                f"Unknown permission(s): {', '.join(sorted(unknown))}", field="permissions"
            )
        return capabilities

    async def list_roles(self, actor: Actor) -> list[RoleEntity]:
        self._authorization.require(actor, Capability.VIEW_ROLES, "role", "list")
        return await self._role_repo.list_all()

    async def get_role(self, actor: Actor, role_id: str) -> RoleEntity:
        self._authorization.require(actor, Capability.VIEW_ROLES, "role", "read")
        return await self._get(role_id)

    async def create_role(self, actor: Actor, data: RoleCreate) -> RoleEntity:
        """Create a custom role (never system, never static).

        Raises:
            RoleAlreadyExistsException: Name taken.
            ValidationException: Bad name, unknown permission, or invalid managed role.
        """
        self._authorization.require(actor, Capability.CREATE_ROLES, "role", "create")
        name = RoleName(data.name).value
        if await self._role_repo.get_by_name(name):
            raise RoleAlreadyExistsException(name)
        role = RoleEntity(
            id=generate_cuid(),
            name=name,
            display_name=data.display_name,
            level=data.level,
            description=data.description,
            capabilities=self._parse_permissions(data.permissions),
            managed_role_ids=await self._validate_managed(data.managed_role_ids),
        )
        created = await self._role_repo.add(role)
        logger.info("Role %s created by %s", created.name, actor.id)
        return created

    async def update_role(self, actor: Actor, role_id: str, data: RoleUpdate) -> RoleEntity:
        """Update a role. The static role cannot be edited.

        Permissions are merged: names present in data.permissions override,
        others keep their current value.
        """
        self._authorization.require(actor, Capability.EDIT_ROLES, "role", "update")
        role = await self._get(role_id)
        if role.is_static:
            raise AuthorizationException(
                message=f"Role '{role.name}' is static and cannot be edited",
                resource="role",
                action="update",
            )
        if data.display_name is not None:
            role.display_name = data.display_name
        if data.level is not None:
            role.level = data.level
        if data.description is not None:
            role.description = data.description
        if data.permissions is not None:
            merged = capabilities_to_bag(role.capabilities)
            merged.update(data.permissions)
            role.capabilities = self._parse_permissions(merged)
        if data.managed_role_ids is not None:
            role.managed_role_ids = await self._validate_managed(data.managed_role_ids)
        role.validate()
        saved = await self._role_repo.save(role)
        logger.info("Role %s updated by %s", saved.name, actor.id)
        return saved

    async def delete_role(self, actor: Actor, role_id: str) -> None:
        """Delete a role no user holds. Static roles are never deleted.

        Raises:
            AuthorizationException: Missing deleteRoles or role is static.
            RoleInUseException: Users still hold the role.
        """
        self._authorization.require(actor, Capability.DELETE_ROLES, "role", "delete")
        role = await self._get(role_id)
        if role.is_static:
            raise AuthorizationException(
                message=f"Role '{role.name}' is static and cannot be deleted",
                resource="role",
                action="delete",
            )
        holders = await self._role_repo.count_users(role.id)
        if holders:
            raise RoleInUseException(role.name, holders)
        await self._role_repo.delete(role.id)
        logger.info("Role %s deleted by %s", role.name, actor.id)
