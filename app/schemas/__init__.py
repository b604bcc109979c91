"""Pydantic request/response schemas for the API."""

from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.role import RoleCreateRequest, RoleResponse, RoleUpdateRequest
from app.schemas.task import (
    ApproveRequest,
    CommentCreateRequest,
    CommentResponse,
    RejectRequest,
    TaskCreateRequest,
    TaskForwardRequest,
    TaskResponse,
    TaskStatusRequest,
    TaskUpdateRequest,
)
from app.schemas.user import UserCreateRequest, UserResponse

__all__ = [
    "ApproveRequest",
    "CommentCreateRequest",
    "CommentResponse",
    "HealthResponse",
    "LoginRequest",
    "ReadinessResponse",
    "RejectRequest",
    "RoleCreateRequest",
    "RoleResponse",
    "RoleUpdateRequest",
    "TaskCreateRequest",
    "TaskForwardRequest",
    "TaskResponse",
    "TaskStatusRequest",
    "TaskUpdateRequest",
    "TokenResponse",
    "UserCreateRequest",
    "UserResponse",
]
