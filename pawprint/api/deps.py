"""
pawprint.api.deps — FastAPI dependency injection
=================================================

Identity is a bearer JWT issued by the site's auth service: ``sub`` is the
member id and ``is_admin`` is the admin capability.  Routes receive an
explicit :class:`Identity`; the engagement services never look at tokens.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from pawprint.config import PawprintConfig, load_config
from pawprint.database.engine import create_db_engine
from pawprint.engine.catalog import MissionCatalog

_WEAK_SECRETS = frozenset({
    "pawprint-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@dataclass(frozen=True, slots=True)
class Identity:
    user_id: str
    is_admin: bool = False


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> PawprintConfig:
    return load_config()


@lru_cache(maxsize=1)
def get_catalog() -> MissionCatalog:
    return MissionCatalog.from_yaml(get_config().missions_path)


def _decode_bearer(authorization: str | None) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    if not payload.get("sub"):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return payload


def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Validate the JWT and return the caller's identity. Raises 401 if invalid."""
    payload = _decode_bearer(authorization)
    return Identity(user_id=str(payload["sub"]), is_admin=bool(payload.get("is_admin")))


def get_current_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Like :func:`get_current_user`, but 403 unless the token carries ``is_admin``."""
    identity = get_current_user(authorization)
    if not identity.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return identity
