"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes get
their services from app.api.v1.dependencies.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import approvals, auth, health, roles, tasks, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
