"""Auth API: login by email or WhatsApp number."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_auth_service
from app.application.services.auth_service import AuthService
from app.core.limiter import limit_auth
from app.schemas.auth import LoginRequest, TokenResponse

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Exchange credentials for a bearer token. 401 on any mismatch."""
    token = await auth_service.login(body.login, body.password)
    return TokenResponse(access_token=token)
