import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError

from wagehire.core import config
from wagehire.core.access_policy import UserRole
from wagehire.core.errors import Unauthenticated

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72

# Same message for every rejection so callers can't tell signature from expiry
INVALID_TOKEN_DETAIL = "Invalid or expired token"

PASSWORD_REQUIREMENTS = [
    "At least 8 characters long",
    "At least one uppercase letter (A-Z)",
    "At least one lowercase letter (a-z)",
    "At least one number (0-9)",
    "At least one special character (!@#$%^&*()_+-=[]{}|;:,.<>?)",
]


class InvalidToken(Unauthenticated):
    default_detail = INVALID_TOKEN_DETAIL


class ExpiredToken(Unauthenticated):
    default_detail = INVALID_TOKEN_DETAIL


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    role: UserRole


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password (max 72 bytes in UTF-8)

    Returns:
        bcrypt hash string

    Raises:
        ValueError: If the password is longer than bcrypt accepts
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        raise ValueError("Password too long (bcrypt limit 72 bytes)")
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against its hash; malformed input never matches."""
    try:
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > BCRYPT_MAX_BYTES:
            return False
        return bcrypt.checkpw(password_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification failed: {e}")
        return False


def password_strength_errors(password: str) -> List[str]:
    """Return the unmet password rules (empty list when the password is strong)."""
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not re.search(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]", password):
        errors.append("Password must contain at least one special character (!@#$%^&*()_+-=[]{}|;:,.<>?)")
    return errors


def create_access_token(user, expires_delta: timedelta = None) -> str:
    """Issue a bearer token carrying the user's id, email and role."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=config.ACCESS_TOKEN_EXPIRE_HOURS))
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify a bearer token and return its claims.

    Raises:
        ExpiredToken: signature valid but ``exp`` is in the past
        InvalidToken: anything else (bad signature, malformed, missing claims)
    """
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except ExpiredSignatureError:
        raise ExpiredToken()
    except JWTError:
        raise InvalidToken()

    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            email=payload["email"],
            role=UserRole(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidToken()


def generate_verification_token() -> str:
    return secrets.token_hex(32)


def generate_password_reset_token() -> str:
    return secrets.token_hex(32)
