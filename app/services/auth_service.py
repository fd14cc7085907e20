from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.models import User
from app.schemas.auth import TokenOut, TokenUser
from app.schemas.user import UserCreate, UserLogin
from app.services.user_service import authenticate_user, create_user
from app.utils.jwt import create_access_token

logger = logging.getLogger(__name__)


def build_token_response(user: User) -> TokenOut:
    """Sign a token for ``user`` and wrap it with its lifetime and identity."""
    token, expires_at = create_access_token(
        user.id,
        claims={
            "email": user.email,
            "username": user.username,
            "role": user.role.value,
        },
    )
    expires_in = int((expires_at - datetime.now(timezone.utc)).total_seconds())
    return TokenOut(
        access_token=token,
        token_type="Bearer",
        expires_in=max(expires_in, 0),
        expires_at=expires_at,
        user=TokenUser.model_validate(user),
    )


async def register(db: AsyncSession, data: UserCreate) -> TokenOut:
    user = await create_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        firstname=data.firstname,
        lastname=data.lastname,
    )
    logger.info(f"✅ User registered: {user.id} - {user.username}")
    return build_token_response(user)


async def login(db: AsyncSession, data: UserLogin) -> TokenOut:
    user = await authenticate_user(db, data.email, data.password)
    return build_token_response(user)
