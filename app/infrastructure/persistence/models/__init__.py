"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.models.department import Department
from app.infrastructure.persistence.models.mixins import EntityModel, VersionedMixin
from app.infrastructure.persistence.models.role import Role, role_managed_role
from app.infrastructure.persistence.models.task import (
    SequenceCounter,
    Task,
    TaskCommentRow,
)
from app.infrastructure.persistence.models.user import User

__all__ = [
    "AuditLog",
    "Department",
    "EntityModel",
    "Role",
    "SequenceCounter",
    "Task",
    "TaskCommentRow",
    "User",
    "VersionedMixin",
    "role_managed_role",
]
