"""
ContactKeeper Backend — Tokens, Passwords and the Authentication Gate
=======================================================================

What:  Issues and verifies JWT bearer tokens, hashes passwords, and provides
       the `get_current_user` dependency every private route depends on.
How:   python-jose signs tokens with the configured HMAC secret; argon2-cffi
       hashes passwords. The dependency reads the token from the
       `x-auth-token` header, falling back to `Authorization: Bearer`.

Token payload:
    {"user": {"id": "<uuid>"}, "exp": <unix time>}

The caller identity comes from the token alone; no database lookup happens
on the request path.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import argon2
from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from contactkeeper.config import settings
from contactkeeper.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_hasher = argon2.PasswordHasher()

# auto_error=False: a missing header is reported by get_current_user with
# the application's own 401 body
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth", auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller identity resolved from a valid token."""

    id: uuid.UUID


# ── Passwords ─────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    """Hash a password using Argon2."""
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Return True if the password matches the hash, False otherwise."""
    try:
        _hasher.verify(hashed, password)
        return True
    except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError):
        return False


# ── Tokens ────────────────────────────────────────────────────────────────

def create_access_token(user_id: uuid.UUID, expires_seconds: Optional[int] = None) -> str:
    """
    Create a signed JWT for the given user.

    Args:
        user_id: Identity to embed under payload["user"]["id"].
        expires_seconds: Optional override of settings.jwt_expires_seconds.
    """
    expire = datetime.now(timezone.utc) + timedelta(
        seconds=expires_seconds or settings.jwt_expires_seconds
    )
    payload: Dict[str, Any] = {
        "user": {"id": str(user_id)},
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> AuthenticatedUser:
    """
    Verify a token and extract the caller identity.

    Raises:
        AuthenticationError: Bad signature, expired, or payload without a
            well-formed user id.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        user_id = uuid.UUID(str(payload["user"]["id"]))
    except (JWTError, KeyError, TypeError, ValueError) as e:
        logger.debug("Rejected token: %s", type(e).__name__)
        raise AuthenticationError(
            message="Token is not valid",
            context={"error_type": type(e).__name__},
        ) from e
    return AuthenticatedUser(id=user_id)


# ── Authentication Gate ───────────────────────────────────────────────────

async def get_current_user(
    x_auth_token: Optional[str] = Header(default=None, alias="x-auth-token"),
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> AuthenticatedUser:
    """
    FastAPI dependency resolving the caller identity.

    Checks in order:
        1. x-auth-token header
        2. Authorization: Bearer <token>

    Raises:
        AuthenticationError: "No token, authorization denied" when neither
            header is present, "Token is not valid" when verification fails.
    """
    token = x_auth_token or bearer_token
    if not token:
        raise AuthenticationError()
    return decode_access_token(token)
