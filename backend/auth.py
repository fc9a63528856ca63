"""
auth.py - session tokens for users and the separate admin gate.
The two identities are unrelated: a user token never opens the admin panel
and an admin token carries no username.
"""

import hashlib
import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Request, HTTPException, status
from jose import jwt, JWTError

import config

logger = logging.getLogger(__name__)

USER_SCOPE = "user"
ADMIN_SCOPE = "admin"


def digest_secret(secret: str) -> str:
    """SHA-256 hex digest, the same one-way form the browser client sends as a password."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def check_admin_password(secret: str) -> bool:
    """Compare the digest of a supplied admin secret with the configured one."""
    if not secret:
        return False
    supplied = digest_secret(secret).encode("utf-8")
    expected = config.ADMIN_PASSWORD_HASH.encode("utf-8")
    return hmac.compare_digest(supplied, expected)


def create_token(data: dict, expires_delta: timedelta) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "jti": str(uuid.uuid4())})
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def create_user_token(username: str) -> str:
    return create_token(
        {"sub": username, "scope": USER_SCOPE},
        timedelta(hours=config.JWT_EXPIRY_HOURS),
    )


def create_admin_token() -> str:
    return create_token(
        {"scope": ADMIN_SCOPE},
        timedelta(minutes=config.ADMIN_TOKEN_EXPIRY_MINUTES),
    )


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None


def _bearer_payload(request: Request) -> dict:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(auth_header.split(" ", 1)[1])
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_current_user(request: Request) -> str:
    """
    FastAPI dependency - extracts the Bearer token from the Authorization
    header, verifies it, and returns the username.
    Raises HTTP 401 if the token is missing, invalid or not a user token.
    """
    payload = _bearer_payload(request)
    username = payload.get("sub")
    if payload.get("scope") != USER_SCOPE or not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token payload missing required claims",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return username


async def require_admin(request: Request) -> dict:
    """FastAPI dependency for the admin panel. Raises 401 without a token, 403 with a non-admin one."""
    payload = _bearer_payload(request)
    if payload.get("scope") != ADMIN_SCOPE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return payload
