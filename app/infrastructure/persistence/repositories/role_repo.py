"""Role repository with audit. Read methods return RoleEntity (domain); rows stay internal."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.role import (
    RoleEntity,
    capabilities_from_bag,
    capabilities_to_bag,
)
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.auditable_repo import (
    AuditableRepository,
)
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from app.application.interfaces.services import IAuditService

logger = get_logger(__name__)


def _role_to_entity(row: Role) -> RoleEntity:
    """Map ORM Role to domain RoleEntity; unknown capability names are dropped."""
    capabilities, unknown = capabilities_from_bag(row.permissions)
    if unknown:
        logger.warning(
            "Role %s has unknown permission name(s) %s; ignoring them",
            row.name,
            sorted(unknown),
        )
    return RoleEntity(
        id=row.id,
        name=row.name,
        display_name=row.display_name,
        level=row.level,
        description=row.description,
        capabilities=capabilities,
        managed_role_ids=frozenset(r.id for r in row.managed_roles if not r.is_static),
        is_system=row.is_system,
        is_static=row.is_static,
    )


class RoleRepository(AuditableRepository[Role]):
    """Role repository. Managed-role edges are stored in role_managed_role."""

    def __init__(
        self,
        db: AsyncSession,
        audit_service: IAuditService | None = None,
    ) -> None:
        super().__init__(db, Role, audit_service)

    def _get_entity_type(self) -> str:
        return "role"

    def _serialize_for_audit(self, obj: Role) -> dict[str, Any]:
        return {
            "id": obj.id,
            "name": obj.name,
            "display_name": obj.display_name,
            "level": obj.level,
            "permissions": dict(obj.permissions or {}),
            "is_system": obj.is_system,
            "is_static": obj.is_static,
        }

    async def _rows(self, role_ids: list[str]) -> list[Role]:
        if not role_ids:
            return []
        result = await self.db.execute(select(Role).where(Role.id.in_(role_ids)))
        return list(result.scalars().all())

    async def get_by_id(self, role_id: str) -> RoleEntity | None:
        row = await self.get_row(role_id)
        return _role_to_entity(row) if row else None

    async def get_by_name(self, name: str) -> RoleEntity | None:
        result = await self.db.execute(select(Role).where(Role.name == name.strip().lower()))
        row = result.scalar_one_or_none()
        return _role_to_entity(row) if row else None

    async def get_many(self, role_ids: list[str]) -> list[RoleEntity]:
        return [_role_to_entity(row) for row in await self._rows(role_ids)]

    async def get_lowest_privilege(self) -> RoleEntity | None:
        result = await self.db.execute(
            select(Role)
            .where(Role.is_static.is_(False))
            .order_by(Role.level.asc(), Role.name.asc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _role_to_entity(row) if row else None

    async def list_all(self) -> list[RoleEntity]:
        result = await self.db.execute(
            select(Role).order_by(Role.level.desc(), Role.name.asc())
        )
        return [_role_to_entity(row) for row in result.scalars().all()]

    async def add(self, role: RoleEntity) -> RoleEntity:
        row = Role(
            id=role.id,
            name=role.name,
            display_name=role.display_name,
            description=role.description,
            level=role.level,
            permissions=capabilities_to_bag(role.capabilities),
            is_system=role.is_system,
            is_static=role.is_static,
        )
        row.managed_roles = await self._rows(sorted(role.managed_role_ids))
        await self.create(row)
        return role

    async def save(self, role: RoleEntity) -> RoleEntity:
        row = await self.get_row(role.id, for_update=True)
        if row is None:
            raise ResourceNotFoundException("role", role.id)
        row.display_name = role.display_name
        row.description = role.description
        row.level = role.level
        row.permissions = capabilities_to_bag(role.capabilities)
        row.managed_roles = await self._rows(sorted(role.managed_role_ids))
        await self.flush_update(row)
        return role

    async def delete(self, role_id: str) -> None:  # type: ignore[override]
        row = await self.get_row(role_id)
        if row is not None:
            await super().delete(row)

    async def count_users(self, role_id: str) -> int:
        result = await self.db.execute(
            select(func.count(User.id)).where(User.role_id == role_id)
        )
        return int(result.scalar_one())
