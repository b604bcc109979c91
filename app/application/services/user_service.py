"""User application service: provisioning and the role graph as seen by one actor."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from app.application.dtos.user import UserCreate
from app.application.interfaces.repositories import IRoleRepository, IUserRepository
from app.application.services.authorization_service import AuthorizationService
from app.domain.authorization import can_assign_role
from app.domain.entities.role import RoleEntity
from app.domain.entities.user import Actor, UserEntity
from app.domain.enums import Capability
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    UserAlreadyExistsException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


class UserService:
    """Create users and list the roles and assignees an actor can reach.

    The granted role must be one the creator's role may manage.
    """

    def __init__(
        self,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        authorization: AuthorizationService,
        hash_password: Callable[[str], str],
    ) -> None:
        self._user_repo = user_repo
        self._role_repo = role_repo
        self._authorization = authorization
        self._hash_password = hash_password

    async def create_user(self, actor: Actor, data: UserCreate) -> UserEntity:
        """Create a user holding data.role_id.

        Raises:
            AuthorizationException: Missing createUsers, or role not grantable by the actor.
            ValidationException: No contact, or password too short.
            UserAlreadyExistsException: Email or WhatsApp number already registered.
        """
        self._authorization.require(actor, Capability.CREATE_USERS, "user", "create")
        if not data.name or not data.name.strip():
            raise ValidationException("Name is required", field="name")
        if not (data.email or data.whatsapp):
            raise ValidationException("Email or WhatsApp number is required", field="email")
        if len(data.password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        role = await self._role_repo.get_by_id(data.role_id)
        if role is None:
            raise ResourceNotFoundException("role", data.role_id)
        if not can_assign_role(actor.role, role):
            raise AuthorizationException(
                message=f"You cannot grant role '{role.display_name}'",
                resource="user",
                action="create",
            )
        for contact in (data.email, data.whatsapp):
            if contact and await self._user_repo.find_by_contact(contact):
                raise UserAlreadyExistsException(contact)

        hashed = await asyncio.to_thread(self._hash_password, data.password)
        user = await self._user_repo.create(data, hashed)
        logger.info("User %s created by %s with role %s", user.id, actor.id, role.name)
        return user

    async def list_grantable_roles(self, actor: Actor) -> list[RoleEntity]:
        """Roles the actor may grant: every non-static role for the static role,
        otherwise the roles on the actor's managed list. Sorted by display name.
        """
        roles = await self._role_repo.list_all()
        grantable = [r for r in roles if can_assign_role(actor.role, r)]
        return sorted(grantable, key=lambda r: r.display_name.lower())

    async def list_assignable_users(self, actor: Actor) -> list[UserEntity]:
        """Active users the actor may assign tasks to, the actor included."""
        roles = {r.id: r for r in await self._role_repo.list_all()}
        assignable = []
        for user in await self._user_repo.list_active():
            if user.id == actor.id:
                assignable.append(user)
                continue
            role = roles.get(user.role_id)
            if role is not None and can_assign_role(actor.role, role):
                assignable.append(user)
        return assignable
