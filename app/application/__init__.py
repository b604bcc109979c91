"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, notifications, audit).
"""

from app.application.interfaces import (
    IAuditService,
    INotificationSender,
    INotificationService,
    IRoleRepository,
    ITaskRepository,
    IUserRepository,
)
from app.application.services import (
    AuthorizationService,
    AuthService,
    RoleService,
    UserService,
)
from app.application.use_cases.tasks import TaskReminderService, TaskWorkflowService

__all__ = [
    "AuthService",
    "AuthorizationService",
    "IAuditService",
    "INotificationSender",
    "INotificationService",
    "IRoleRepository",
    "ITaskRepository",
    "IUserRepository",
    "RoleService",
    "TaskReminderService",
    "TaskWorkflowService",
    "UserService",
]
