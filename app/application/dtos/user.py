"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserCreate:
    """Input for provisioning a user. One of email or whatsapp is required."""

    name: str
    password: str
    role_id: str
    email: str | None = None
    whatsapp: str | None = None
    designation: str | None = None
    department_id: str | None = None


@dataclass(frozen=True)
class UserCredentials:
    """Login lookup result: the user plus its stored password hash."""

    user_id: str
    hashed_password: str
    is_active: bool
