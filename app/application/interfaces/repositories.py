"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from app.shared.enums import AuditAction

if TYPE_CHECKING:
    from app.application.dtos.user import UserCreate, UserCredentials
    from app.domain.authorization import TaskVisibilityScope
    from app.domain.entities.role import RoleEntity
    from app.domain.entities.task import TaskEntity
    from app.domain.entities.user import UserEntity
    from app.domain.enums import TaskView


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for task persistence with versioned, atomic single-task writes."""

    async def next_sno(self) -> int:
        """Allocate the next serial number inside the current transaction (gapless)."""

    async def add(self, task: TaskEntity) -> TaskEntity:
        """Insert a new task (version 1) with its comments."""

    async def get_by_id(self, task_id: str, *, for_update: bool = False) -> TaskEntity | None:
        """Return task with comments. for_update locks the row until the transaction ends."""

    async def save(
        self, task: TaskEntity, action: AuditAction = AuditAction.UPDATED
    ) -> TaskEntity:
        """Persist a transition if the stored version still equals task.version.

        Bumps task.version, inserts comments appended since load and audits
        the write as action. Raises TaskVersionConflictException when another
        writer got there first.
        """

    async def delete(self, task: TaskEntity) -> None:
        """Physically delete the task and its comments."""

    async def list_for_actor(
        self,
        actor_id: str,
        view: TaskView,
        scope: TaskVisibilityScope,
        skip: int = 0,
        limit: int = 100,
    ) -> list[TaskEntity]:
        """Return tasks for a named view (newest first). ALL uses scope as the filter."""

    async def list_pending_approvals(self, approver_id: str) -> list[TaskEntity]:
        """Return Waiting for Approval tasks whose approval is due from approver_id."""

    async def list_open(self) -> list[TaskEntity]:
        """Return every Pending or In Progress task (reminder digest)."""


# Role repository interface
class IRoleRepository(Protocol):
    """Protocol for role lookup and administration."""

    async def get_by_id(self, role_id: str) -> RoleEntity | None:
        """Return role by id, or None."""

    async def get_by_name(self, name: str) -> RoleEntity | None:
        """Return role by unique lower-case name, or None."""

    async def get_many(self, role_ids: list[str]) -> list[RoleEntity]:
        """Return the roles that exist among role_ids."""

    async def get_lowest_privilege(self) -> RoleEntity | None:
        """Return the non-static role with the lowest level, or None when no roles exist."""

    async def list_all(self) -> list[RoleEntity]:
        """Return all roles, most senior first."""

    async def add(self, role: RoleEntity) -> RoleEntity:
        """Insert a role with its managed-role edges."""

    async def save(self, role: RoleEntity) -> RoleEntity:
        """Persist role fields and replace its managed-role edges."""

    async def delete(self, role_id: str) -> None:
        """Delete a role; edges pointing to it are removed."""

    async def count_users(self, role_id: str) -> int:
        """Return number of users holding the role."""


# User repository interface
class IUserRepository(Protocol):
    """Protocol for reading users and provisioning new ones."""

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        """Return user by id, or None."""

    async def find_by_contact(self, contact: str) -> UserEntity | None:
        """Return the user whose email or WhatsApp number equals contact."""

    async def get_many(self, user_ids: list[str]) -> list[UserEntity]:
        """Return the users that exist among user_ids."""

    async def list_active(self) -> list[UserEntity]:
        """Return active users ordered by name."""

    async def create(self, data: UserCreate, hashed_password: str) -> UserEntity:
        """Insert a user. Raises UserAlreadyExistsException on duplicate contact."""

    async def get_credentials(self, login: str) -> UserCredentials | None:
        """Return credentials for an email or WhatsApp login, or None."""
