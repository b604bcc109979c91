"""Login: verify credentials and issue an access token."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from app.application.interfaces.repositories import IUserRepository
from app.domain.exceptions import AuthenticationException


class AuthService:
    """Authenticate by email or WhatsApp number and password."""

    def __init__(
        self,
        user_repo: IUserRepository,
        verify_password: Callable[[str, str], bool],
        create_access_token: Callable[[dict[str, Any]], str],
    ) -> None:
        self._user_repo = user_repo
        self._verify_password = verify_password
        self._create_access_token = create_access_token

    async def login(self, login: str, password: str) -> str:
        """Return a bearer token. Raises AuthenticationException on any mismatch."""
        credentials = await self._user_repo.get_credentials(login.strip())
        if credentials is None or not credentials.is_active:
            raise AuthenticationException("Invalid credentials")
        matches = await asyncio.to_thread(
            self._verify_password, password, credentials.hashed_password
        )
        if not matches:
            raise AuthenticationException("Invalid credentials")
        return self._create_access_token({"sub": credentials.user_id})
