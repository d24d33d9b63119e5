"""
Bearer-token helpers (JWT, HS256 by default).

Tokens are minted outside this service; `build_access_token` exists for
tooling and tests.
"""

from __future__ import annotations

import time
from typing import Any

import jwt

from core.config import AuthConfig

DEFAULT_ACCESS_TOKEN_TTL_S = 15 * 60


class AuthSecurityError(RuntimeError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


def build_access_token(
    config: AuthConfig,
    *,
    subject: str,
    ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL_S,
) -> str:
    issued_at = now_epoch_s()
    payload = {
        "sub": subject,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + ttl_seconds,
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(config: AuthConfig, token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload
