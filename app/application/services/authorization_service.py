"""Authorization service: role resolution with a per-request cache, capability checks."""

from __future__ import annotations

from app.application.interfaces.repositories import IRoleRepository
from app.domain.authorization import can_perform
from app.domain.entities.role import RoleEntity, unprivileged_role
from app.domain.entities.user import Actor, UserEntity
from app.domain.enums import Capability
from app.domain.exceptions import AuthorizationException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class AuthorizationService:
    """Resolves roles once per instance (one instance per request) and checks capabilities.

    A user whose role is missing or deleted falls back to the lowest-privilege
    role; when no role exists at all, to a role with no capabilities.
    """

    def __init__(self, role_repo: IRoleRepository) -> None:
        self.role_repo = role_repo
        self._roles: dict[str, RoleEntity] = {}
        self._fallback: RoleEntity | None = None

    async def _fallback_role(self) -> RoleEntity:
        if self._fallback is None:
            self._fallback = await self.role_repo.get_lowest_privilege() or unprivileged_role()
        return self._fallback

    async def resolve_role(self, role_id: str | None) -> RoleEntity:
        """Return the role for role_id, or the fallback role when it cannot be found."""
        if role_id and role_id in self._roles:
            return self._roles[role_id]
        role = await self.role_repo.get_by_id(role_id) if role_id else None
        if role is None:
            fallback = await self._fallback_role()
            logger.warning(
                "Role %r not found; falling back to %r", role_id, fallback.name
            )
            return fallback
        self._roles[role.id] = role
        return role

    async def resolve_actor(self, user: UserEntity) -> Actor:
        return Actor(user=user, role=await self.resolve_role(user.role_id))

    def check(self, actor: Actor, permission: Capability | str) -> bool:
        """Return True if the actor's role grants permission.

        The static role holds every known capability; unknown names are denied
        for everyone.
        """
        if actor.role.is_static:
            if isinstance(permission, Capability):
                return True
            return Capability.parse(permission) is not None
        return can_perform(actor.role, permission)

    def require(
        self,
        actor: Actor,
        permission: Capability | str,
        resource: str,
        action: str,
    ) -> None:
        """Raise AuthorizationException if the actor lacks permission."""
        if not self.check(actor, permission):
            logger.info(
                "Denied %s:%s for user %s (role %s)",
                resource,
                action,
                actor.id,
                actor.role.name,
            )
            raise AuthorizationException(resource=resource, action=action)
