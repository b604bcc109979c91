"""User and actor domain entities.

Users are owned by user management; the task core only reads them. An Actor
is a user together with the role resolved for the current operation.
"""

from dataclasses import dataclass

from app.domain.entities.role import RoleEntity


@dataclass(frozen=True)
class UserEntity:
    """Read-only user profile used as task creator, assignee, or forwarder."""

    id: str
    name: str
    email: str | None = None
    whatsapp: str | None = None
    designation: str | None = None
    role_id: str | None = None
    department_id: str | None = None
    is_active: bool = True

    @property
    def contact(self) -> str:
        """Email when present, else WhatsApp number."""
        return self.email or self.whatsapp or ""

    def has_contact(self, value: str | None) -> bool:
        """Return whether value matches this user's email or WhatsApp number."""
        if not value:
            return False
        return value in (self.email, self.whatsapp)


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an action, with a resolved role."""

    user: UserEntity
    role: RoleEntity

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def name(self) -> str:
        return self.user.name

    @property
    def department_id(self) -> str | None:
        return self.user.department_id

    @property
    def role_label(self) -> str:
        return self.role.display_name
