"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.role import RoleEntity
from app.domain.entities.task import TaskComment, TaskEntity, TaskEvent
from app.domain.entities.user import Actor, UserEntity

__all__ = [
    "Actor",
    "RoleEntity",
    "TaskComment",
    "TaskEntity",
    "TaskEvent",
    "UserEntity",
]
