"""User repository with audit. Interface methods return domain UserEntity or DTOs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import UserCreate, UserCredentials
from app.domain.entities.user import UserEntity
from app.domain.exceptions import UserAlreadyExistsException
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.auditable_repo import (
    AuditableRepository,
)

if TYPE_CHECKING:
    from app.application.interfaces.services import IAuditService


def _user_to_entity(u: User) -> UserEntity:
    """Map ORM User to domain UserEntity (no password)."""
    return UserEntity(
        id=u.id,
        name=u.name,
        email=u.email,
        whatsapp=u.whatsapp,
        designation=u.designation,
        role_id=u.role_id,
        department_id=u.department_id,
        is_active=u.is_active,
    )


class UserRepository(AuditableRepository[User]):
    """User repository: lookup by id or contact, provisioning, credential lookup."""

    def __init__(
        self,
        db: AsyncSession,
        audit_service: IAuditService | None = None,
    ) -> None:
        super().__init__(db, User, audit_service)

    def _get_entity_type(self) -> str:
        return "user"

    def _serialize_for_audit(self, obj: User) -> dict[str, Any]:
        return {
            "id": obj.id,
            "name": obj.name,
            "email": obj.email,
            "whatsapp": obj.whatsapp,
            "role_id": obj.role_id,
            "department_id": obj.department_id,
            "is_active": obj.is_active,
        }

    async def _find_row_by_contact(self, contact: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .where(or_(User.email == contact, User.whatsapp == contact))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        row = await self.get_row(user_id)
        return _user_to_entity(row) if row else None

    async def find_by_contact(self, contact: str) -> UserEntity | None:
        row = await self._find_row_by_contact(contact.strip())
        return _user_to_entity(row) if row else None

    async def get_many(self, user_ids: list[str]) -> list[UserEntity]:
        wanted = list(dict.fromkeys(uid for uid in user_ids if uid))
        if not wanted:
            return []
        result = await self.db.execute(select(User).where(User.id.in_(wanted)))
        return [_user_to_entity(row) for row in result.scalars().all()]

    async def list_active(self) -> list[UserEntity]:
        result = await self.db.execute(
            select(User).where(User.is_active.is_(True)).order_by(User.name.asc())
        )
        return [_user_to_entity(row) for row in result.scalars().all()]

    async def create(self, data: UserCreate, hashed_password: str) -> UserEntity:  # type: ignore[override]
        row = User(
            name=data.name.strip(),
            email=(data.email or "").strip().lower() or None,
            whatsapp=(data.whatsapp or "").strip() or None,
            designation=data.designation,
            hashed_password=hashed_password,
            role_id=data.role_id,
            department_id=data.department_id,
        )
        try:
            created = await super().create(row)
        except IntegrityError as e:
            raise UserAlreadyExistsException(data.email or data.whatsapp or "") from e
        return _user_to_entity(created)

    async def get_credentials(self, login: str) -> UserCredentials | None:
        row = await self._find_row_by_contact(login)
        if row is None and "@" in login:
            row = await self._find_row_by_contact(login.lower())
        if row is None:
            return None
        return UserCredentials(
            user_id=row.id,
            hashed_password=row.hashed_password,
            is_active=row.is_active,
        )
