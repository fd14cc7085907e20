from typing import Annotated
from fastapi import APIRouter, Depends, Query, status

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.auth import AdminUser, CurrentUser, StaffUser
from app.database.db_depends import get_db
from app.schemas.user import (
    AdminUserCreate,
    AdminUserUpdate,
    UserOut,
    UserUpdate,
)
from app.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])

DBType = Annotated[AsyncSession, Depends(get_db)]


@router.get("/me",
            response_model=UserOut,
            summary='Get information about the current user')
async def get_my_profile(current_user: CurrentUser):
    return current_user


@router.patch("/me",
              response_model=UserOut,
              summary="Update the current user's profile")
async def update_my_profile(db: DBType, user_update: UserUpdate, current_user: CurrentUser):
    """
    Update your own profile.

    - **firstname**, **lastname**, **avatar**: optional
    - **password**: new password, requires **current_password**
    """
    return await user_service.update_user(db, current_user.id, user_update)


@router.delete("/me",
               status_code=status.HTTP_204_NO_CONTENT,
               summary="Delete your account")
async def delete_my_account(db: DBType, current_user: CurrentUser):
    """Delete your account and your whole library."""
    await user_service.delete_user(db, current_user.id)
    return None


# Admin / moderator
@router.get(
    "",
    response_model=list[UserOut],
    summary="[Admin] List users"
)
async def list_users(
    db: DBType,
    current_user: StaffUser,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 100,
):
    return await user_service.get_all_users(db, skip, limit)


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Create a user"
)
async def create_user(db: DBType, data: AdminUserCreate, current_user: AdminUser):
    return await user_service.create_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        firstname=data.firstname,
        lastname=data.lastname,
        role=data.role,
    )


@router.get("/{user_id}",
            response_model=UserOut,
            summary="[Admin] Get a user")
async def get_user(db: DBType, user_id: int, current_user: StaffUser):
    return await user_service.require_user(db, user_id)


@router.patch("/{user_id}",
              response_model=UserOut,
              summary="[Admin] Update a user")
async def update_user(db: DBType, user_id: int, user_update: AdminUserUpdate, current_user: AdminUser):
    return await user_service.admin_update_user(db, user_id, user_update)


@router.delete("/{user_id}",
               status_code=status.HTTP_204_NO_CONTENT,
               summary="[Admin] Delete a user")
async def delete_user(db: DBType, user_id: int, current_user: AdminUser):
    await user_service.delete_user(db, user_id)
    return None
