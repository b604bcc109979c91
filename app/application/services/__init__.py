"""Application services: authorization, role administration, user provisioning, login."""

from app.application.services.auth_service import AuthService
from app.application.services.authorization_service import AuthorizationService
from app.application.services.role_service import RoleService
from app.application.services.user_service import UserService

__all__ = [
    "AuthService",
    "AuthorizationService",
    "RoleService",
    "UserService",
]
