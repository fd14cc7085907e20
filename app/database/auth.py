from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, ExpiredSignatureError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.exceptions import PermissionDeniedError
from app.database.db_depends import get_db
from app.models import User
from app.models.enum import UserRole
from app.utils.jwt import decode_access_token

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """
    Resolve the caller from the ``Authorization: Bearer <token>`` header.

    Missing, expired or malformed tokens, unknown users and deactivated
    accounts all end in 401.
    """
    if not credentials:
        logger.warning("❌ Authentication failed: no token")
        raise _unauthorized("Not authenticated")

    try:
        data = decode_access_token(credentials.credentials)
        user_id = data.get("sub")

        if not user_id:
            raise ValueError("Missing 'sub' in token")

        user_id = int(user_id)
        logger.debug(f"✅ Token decoded successfully: user_id={user_id}")

    except ExpiredSignatureError:
        logger.warning("❌ Token expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"❌ JWT error: {e}")
        raise _unauthorized("Could not validate credentials")
    except (ValueError, TypeError) as e:
        logger.warning(f"❌ Token format error: {e}")
        raise _unauthorized("Invalid token format")

    user = await db.get(User, user_id)

    if not user:
        logger.warning(f"❌ User {user_id} not found in database")
        raise _unauthorized("User not found")
    if not user.is_active:
        logger.warning(f"❌ User {user_id} is deactivated")
        raise _unauthorized("Account is deactivated")

    logger.debug(f"✅ User authenticated: {user.id} - {user.username}")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: the caller must hold one of ``roles``."""

    async def checker(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"⚠️ User {current_user.id} ({current_user.role.value}) denied, needs {[r.value for r in roles]}"
            )
            raise PermissionDeniedError("Insufficient permissions")
        return current_user

    return checker


CurrentUser = Annotated[User, Depends(get_current_user)]
StaffUser = Annotated[User, Depends(require_roles(UserRole.ADMIN, UserRole.MODERATOR))]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
