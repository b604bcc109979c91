"""User API schemas."""

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.domain.entities.user import UserEntity


class UserCreateRequest(BaseModel):
    """Request body for provisioning a user. One of email or whatsapp is required."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr | None = None
    whatsapp: str | None = Field(default=None, pattern=r"^\+?[0-9]{7,15}$")
    password: str = Field(..., min_length=8, max_length=256)
    role_id: str = Field(..., min_length=1)
    designation: str | None = Field(default=None, max_length=100)
    department_id: str | None = None

    @model_validator(mode="after")
    def require_contact(self) -> "UserCreateRequest":
        if not self.email and not self.whatsapp:
            raise ValueError("email or whatsapp is required")
        return self


class UserResponse(BaseModel):
    """User response (no credentials)."""

    id: str
    name: str
    email: str | None
    whatsapp: str | None
    designation: str | None
    role_id: str | None
    department_id: str | None
    is_active: bool

    @classmethod
    def from_entity(cls, user: UserEntity) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            whatsapp=user.whatsapp,
            designation=user.designation,
            role_id=user.role_id,
            department_id=user.department_id,
            is_active=user.is_active,
        )
