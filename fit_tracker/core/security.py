"""Bearer token handling: resolve the caller from a Supabase-style access token."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from typing import Any

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from fit_tracker.core.config import Settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Token missing, malformed, expired or rejected by the identity provider."""


class AuthUser(BaseModel):
    """Authenticated caller. `id` is the token subject and the user id everywhere else."""

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def first_name(self) -> str | None:
        return self.user_metadata.get("first_name")

    @property
    def last_name(self) -> str | None:
        return self.user_metadata.get("last_name")

    @property
    def avatar_url(self) -> str | None:
        return self.user_metadata.get("avatar_url")


def decode_token_claims(token: str) -> dict[str, Any]:
    """Decode the JWT payload segment (no signature check)."""
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthError("Malformed token")
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(segment))
    except (binascii.Error, ValueError) as e:
        raise AuthError("Malformed token") from e
    if not isinstance(claims, dict):
        raise AuthError("Malformed token")
    return claims


def _auth_user(user_id: Any, email: Any, metadata: Any) -> AuthUser:
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise AuthError("Malformed user metadata")
    try:
        return AuthUser(id=str(user_id), email=email, user_metadata=metadata)
    except ValidationError as e:
        raise AuthError("Malformed token claims") from e


def user_from_claims(claims: dict[str, Any], now: datetime | None = None) -> AuthUser:
    sub = claims.get("sub")
    if not sub:
        raise AuthError("Token has no subject")
    exp = claims.get("exp")
    if exp is not None:
        try:
            expires_at = float(exp)
        except (TypeError, ValueError) as e:
            raise AuthError("Malformed expiry claim") from e
        now = now or datetime.now(timezone.utc)
        if expires_at < now.timestamp():
            raise AuthError("Token expired")
    return _auth_user(sub, claims.get("email"), claims.get("user_metadata"))


async def fetch_provider_user(token: str, settings: Settings) -> AuthUser:
    """Ask the identity provider who owns this token (GET /auth/v1/user)."""
    url = settings.auth_provider_url.rstrip("/") + "/auth/v1/user"
    headers = {"Authorization": f"Bearer {token}"}
    if settings.auth_provider_api_key:
        headers["apikey"] = settings.auth_provider_api_key
    timeout = aiohttp.ClientTimeout(total=settings.auth_timeout_seconds)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, headers=headers) as resp:
                if resp.status != 200:
                    raise AuthError(f"Identity provider rejected token ({resp.status})")
                data = await resp.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning("Identity provider unreachable: %r", e)
        raise AuthError("Identity provider unreachable") from e
    except ValueError as e:
        logger.warning("Identity provider sent a non-JSON body")
        raise AuthError("Identity provider returned an invalid response") from e
    if not isinstance(data, dict) or not data.get("id"):
        raise AuthError("Identity provider returned no user")
    return _auth_user(data["id"], data.get("email"), data.get("user_metadata"))


async def authenticate_token(token: str, settings: Settings) -> AuthUser:
    if settings.auth_provider_url:
        return await fetch_provider_user(token, settings)
    return user_from_claims(decode_token_claims(token))
