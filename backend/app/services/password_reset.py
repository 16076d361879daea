"""
Password reset service.

Reset tokens are short-lived JWTs with a ``type`` claim so they can never be
used as access tokens. Each token also carries a fingerprint of the user's
current password hash, which makes it single-use: once the password
changes, every outstanding token stops verifying.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.logging import get_logger
from app.models.user import User
from app.services.auth_service import get_password_hash, get_user_by_email

logger = get_logger(__name__)
settings = get_settings()

RESET_TOKEN_TYPE = "password_reset"
RESET_TOKEN_EXPIRE_HOURS = 1


def _password_fingerprint(user: User) -> str:
    return hashlib.sha256(user.hashed_password.encode()).hexdigest()[:16]


def create_password_reset_token(user: User) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=RESET_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "sub": user.email,
        "exp": expire,
        "type": RESET_TOKEN_TYPE,
        "pwd": _password_fingerprint(user),
        "jti": secrets.token_hex(16),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_password_reset_token(db: Session, token: str) -> User | None:
    """
    Resolve a reset token to its user.

    Returns None when the token is malformed, expired, not a reset token,
    or was issued before the user's password last changed.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != RESET_TOKEN_TYPE:
        return None

    email = payload.get("sub")
    if not email:
        return None

    user = get_user_by_email(db, email)
    if user is None or payload.get("pwd") != _password_fingerprint(user):
        return None
    return user


def reset_password(db: Session, token: str, new_password: str) -> bool:
    user = verify_password_reset_token(db, token)
    if user is None:
        return False

    user.hashed_password = get_password_hash(new_password)
    user.updated_at = datetime.utcnow()
    db.commit()

    logger.info(f"Password reset for user {user.id}")
    return True


def request_password_reset(db: Session, email: str) -> str | None:
    """
    Issue a reset token for ``email``.

    Returns None for unknown addresses; callers answer identically either
    way so the endpoint does not reveal which emails are registered.
    """
    user = get_user_by_email(db, email)
    if user is None:
        return None

    # TODO: deliver the reset link by email once an outbound mail provider is configured
    return create_password_reset_token(user)
