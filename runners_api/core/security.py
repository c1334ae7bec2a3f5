"""Password hashing, password policy and JWT creation/verification."""

import re
import secrets
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from runners_api.core.config import settings
from runners_api.core.timeutil import utcnow

if TYPE_CHECKING:
    from runners_api.models.user import User

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
_BCRYPT_MAX_BYTES = 72

# Token "typ" claims keep access tokens and signed file tokens from being swapped.
ACCESS_TOKEN_TYPE = "access"
FILE_TOKEN_TYPE = "file"

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile(r"[^A-Za-z0-9]"), "one special character"),
)


def password_policy_errors(password: str) -> list[str]:
    """Return the unmet password requirements (empty list when the password is acceptable)."""
    unmet: list[str] = []
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        unmet.append(f"between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters")
    unmet.extend(label for pattern, label in _PASSWORD_RULES if not pattern.search(password))
    return unmet


def hash_password(plain_password: str) -> str:
    """bcrypt hash of plain_password, salted with BCRYPT_ROUNDS."""
    # bcrypt only reads the first 72 bytes.
    secret = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """False for a missing or malformed hash instead of raising."""
    if not hashed:
        return False
    secret = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(secret, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_opaque_token() -> str:
    """Random URL-safe token for email verification and password reset links."""
    return secrets.token_urlsafe(32)


def create_access_token(user: "User") -> tuple[str, datetime]:
    """Create a signed access token for user; returns (token, expires_at)."""
    now = utcnow()
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "name": user.full_name,
        "typ": ACCESS_TOKEN_TYPE,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "exp": expire,
        "iat": now,
    }
    token = jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )
    return token, expire


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token; return its payload.
    Raises jwt.PyJWTError on invalid, expired or wrong-audience tokens.
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )
    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not an access token")
    return payload


def create_file_token(storage_key: str, expires_in: timedelta) -> tuple[str, datetime]:
    """Sign a short-lived read grant for one stored file."""
    expire = utcnow() + expires_in
    payload = {
        "key": storage_key,
        "typ": FILE_TOKEN_TYPE,
        "aud": settings.JWT_AUDIENCE,
        "exp": expire,
    }
    token = jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )
    return token, expire


def decode_file_token(token: str) -> str:
    """Return the storage key granted by token. Raises jwt.PyJWTError when invalid."""
    payload = jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )
    if payload.get("typ") != FILE_TOKEN_TYPE or not payload.get("key"):
        raise jwt.InvalidTokenError("Not a file token")
    return str(payload["key"])
