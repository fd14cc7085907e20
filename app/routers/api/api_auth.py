from typing import Annotated
from fastapi import APIRouter, Depends, Request, status

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.limiter import limiter
from app.database.auth import CurrentUser
from app.database.db_depends import get_db
from app.schemas.auth import TokenOut, TokenValidation
from app.schemas.user import UserCreate, UserLogin, UserOut
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])

DBType = Annotated[AsyncSession, Depends(get_db)]


@router.post(
    "/register",
    response_model=TokenOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a new user account and return an access token",
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register(request: Request, db: DBType, data: UserCreate):
    """
    Register a new user.

    - **username**: unique, 3-30 characters
    - **email**: unique email address
    - **password**: at least 6 characters
    """
    return await auth_service.register(db, data)


@router.post("/login",
             response_model=TokenOut,
             summary="Log in with email and password")
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(request: Request, db: DBType, data: UserLogin):
    return await auth_service.login(db, data)


@router.get("/profile",
            response_model=UserOut,
            summary="Get the profile of the token owner")
async def profile(current_user: CurrentUser):
    return current_user


@router.get("/validate",
            response_model=TokenValidation,
            summary="Check that the bearer token is valid")
async def validate(current_user: CurrentUser):
    return TokenValidation()
