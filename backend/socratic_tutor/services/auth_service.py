"""Password hashing, JWT token creation and verification, class codes."""

import secrets
import string
import time
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt, JWTError

from socratic_tutor.config import settings

ALGORITHM = "HS256"
_CLASS_CODE_ALPHABET = string.ascii_uppercase + string.digits


def hash_password(plain: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against a hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        # Invalid/unsupported stored hash should fail closed.
        return False


def _create_token(user_id: str, token_type: str, lifetime: timedelta) -> str:
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + lifetime,
        "token_type": token_type,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def create_access_token(user_id: str) -> str:
    """Create a short-lived access token."""
    return _create_token(
        user_id, "access", timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )


def create_refresh_token(user_id: str) -> str:
    """Create a long-lived refresh token."""
    return _create_token(
        user_id, "refresh", timedelta(days=settings.jwt_refresh_token_expire_days)
    )


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
        return payload
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}")


def generate_class_code() -> str:
    """Return a class code such as ``CLS-K3QZ42`` for a newly registered teacher."""
    random_part = "".join(secrets.choice(_CLASS_CODE_ALPHABET) for _ in range(4))
    return f"CLS-{random_part}{str(int(time.time() * 1000))[-2:]}"
