"""Domain layer: entities, value objects, enums, exceptions and authorization rules.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    Actor,
    RoleEntity,
    TaskComment,
    TaskEntity,
    TaskEvent,
    UserEntity,
)
from app.domain.enums import (
    ApprovalStatus,
    Capability,
    DurationUnit,
    TaskPriority,
    TaskStatus,
    TaskView,
)
from app.domain.exceptions import (
    AlreadyInTargetStateException,
    AuthenticationException,
    AuthorizationException,
    InvalidStateTransitionException,
    ResourceNotFoundException,
    TaskflowException,
    ValidationException,
)
from app.domain.value_objects import Duration, RoleName

__all__ = [
    # Entities
    "Actor",
    "RoleEntity",
    "TaskComment",
    "TaskEntity",
    "TaskEvent",
    "UserEntity",
    # Enums
    "ApprovalStatus",
    "Capability",
    "DurationUnit",
    "TaskPriority",
    "TaskStatus",
    "TaskView",
    # Exceptions
    "AlreadyInTargetStateException",
    "AuthenticationException",
    "AuthorizationException",
    "InvalidStateTransitionException",
    "ResourceNotFoundException",
    "TaskflowException",
    "ValidationException",
    # Value objects
    "Duration",
    "RoleName",
]
