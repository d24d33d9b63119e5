"""
Auth dependencies for protected FastAPI routes.

The guard is only enforced when `AUTH_ENABLED` is set; otherwise it lets
every request through.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import AppConfig
from core.dependencies import get_config

from . import security

# auto_error=False: a missing or non-bearer header reaches us as None so the
# guard can stay a no-op when auth is disabled.
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_access_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: AppConfig = Depends(get_config),
) -> dict | None:
    if not config.auth.enabled:
        return None

    if credentials is None or not credentials.credentials.strip():
        raise _unauthorized("Authorization must be: Bearer <token>.")

    try:
        return security.decode_access_token(config.auth, credentials.credentials)
    except security.AuthSecurityError as exc:
        raise _unauthorized(str(exc)) from exc
