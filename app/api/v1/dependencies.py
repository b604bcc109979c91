"""Presentation-layer dependency injection (composition root).

Builds repositories and application services per request from one
transactional session, and resolves the authenticated Actor. Routes depend
only on these providers, never on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.auth_service import AuthService
from app.application.services.authorization_service import AuthorizationService
from app.application.services.role_service import RoleService
from app.application.services.user_service import UserService
from app.application.use_cases.tasks import TaskWorkflowService
from app.core.config import get_settings
from app.domain.entities.user import Actor, UserEntity
from app.domain.exceptions import AuthenticationException
from app.infrastructure.persistence.database import (
    get_db_transactional,
    session_factory,
)
from app.infrastructure.persistence.repositories import (
    RoleRepository,
    TaskRepository,
    UserRepository,
)
from app.infrastructure.security.jwt import create_access_token, verify_token
from app.infrastructure.security.password import get_password_hash, verify_password
from app.infrastructure.services import (
    LogOnlyNotificationSender,
    NotificationDispatcher,
    SystemAuditService,
    session_contact_lookup,
)
from app.shared.context import bind_actor

DbSession = Annotated[AsyncSession, Depends(get_db_transactional)]

_http_bearer = HTTPBearer(auto_error=False)


# ---- repositories ----


def get_audit_service(db: DbSession) -> SystemAuditService:
    """Audit rows are written in the request transaction."""
    return SystemAuditService(db)


def get_task_repo(
    db: DbSession,
    audit: Annotated[SystemAuditService, Depends(get_audit_service)],
) -> TaskRepository:
    return TaskRepository(db, audit_service=audit)


def get_role_repo(
    db: DbSession,
    audit: Annotated[SystemAuditService, Depends(get_audit_service)],
) -> RoleRepository:
    return RoleRepository(db, audit_service=audit)


def get_user_repo(
    db: DbSession,
    audit: Annotated[SystemAuditService, Depends(get_audit_service)],
) -> UserRepository:
    return UserRepository(db, audit_service=audit)


# ---- services ----


def get_authorization_service(
    role_repo: Annotated[RoleRepository, Depends(get_role_repo)],
) -> AuthorizationService:
    return AuthorizationService(role_repo)


def get_notifier(background_tasks: BackgroundTasks) -> NotificationDispatcher:
    """Deliveries run as background tasks, after the response is sent."""
    return NotificationDispatcher(
        LogOnlyNotificationSender(),
        contact_lookup=session_contact_lookup(session_factory()),
        schedule=background_tasks.add_task,
        enabled=get_settings().notifications_enabled,
    )


def get_task_workflow_service(
    task_repo: Annotated[TaskRepository, Depends(get_task_repo)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
) -> TaskWorkflowService:
    return TaskWorkflowService(
        task_repo,
        user_repo,
        authorization,
        notifier,
        max_attempts=get_settings().task_save_max_attempts,
    )


def get_role_service(
    role_repo: Annotated[RoleRepository, Depends(get_role_repo)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> RoleService:
    return RoleService(role_repo, authorization)


def get_user_service(
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    role_repo: Annotated[RoleRepository, Depends(get_role_repo)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> UserService:
    return UserService(user_repo, role_repo, authorization, get_password_hash)


def get_auth_service(
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> AuthService:
    return AuthService(user_repo, verify_password, create_access_token)


# ---- authentication ----


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> UserEntity:
    """Return the active user named by the bearer token; 401 otherwise."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException("Invalid or expired token") from e
    user = await user_repo.get_by_id(payload["sub"])
    if user is None or not user.is_active:
        raise AuthenticationException("User not found or inactive")
    bind_actor(user.id)
    return user


async def get_current_actor(
    user: Annotated[UserEntity, Depends(get_current_user)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> Actor:
    """Authenticated user with its role resolved once for the request."""
    return await authorization.resolve_actor(user)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
