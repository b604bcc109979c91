"""Application ports: repository and service protocols."""

from app.application.interfaces.repositories import (
    IRoleRepository,
    ITaskRepository,
    IUserRepository,
)
from app.application.interfaces.services import (
    IAuditService,
    INotificationSender,
    INotificationService,
)

__all__ = [
    "IAuditService",
    "INotificationSender",
    "INotificationService",
    "IRoleRepository",
    "ITaskRepository",
    "IUserRepository",
]
