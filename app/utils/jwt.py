from datetime import datetime, timedelta, timezone
from typing import Any
from jose import jwt
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str | int,
    claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    """
    Sign a JWT for ``subject``.

    Returns:
        (token, expiration datetime)
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + expires_delta
    to_encode = dict(claims or {})
    to_encode.update(
        {
            "sub": str(subject),
            "exp": expires_at,
            "iat": issued_at,
        }
    )
    token = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    logger.debug(f"✅ JWT created: sub={subject}, exp={expires_at}")
    return token, expires_at


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
