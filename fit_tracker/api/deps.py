"""Shared FastAPI dependencies: settings, storage per request, current user."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fit_tracker.core.config import Settings
from fit_tracker.core.security import AuthError, AuthUser, authenticate_token
from fit_tracker.storage import Storage

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_storage(request: Request) -> AsyncIterator[Storage]:
    """One unit of work per request: committed after the handler, rolled back on error."""
    async with request.app.state.storage.session() as storage:
        yield storage


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> AuthUser:
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing bearer token")
    return await authenticate_token(credentials.credentials, settings)
