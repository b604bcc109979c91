"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.auditable_repo import AuditableRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.role_repo import RoleRepository
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "AuditableRepository",
    "BaseRepository",
    "RoleRepository",
    "TaskRepository",
    "UserRepository",
]
