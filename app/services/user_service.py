from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
import logging

from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    LibraryValidationError,
    NotFoundError,
)
from app.models import Book, User
from app.models.enum import UserRole
from app.schemas.user import AdminUserUpdate, UserUpdate
from app.utils.hashing import hash_password, verify_password


logger = logging.getLogger(__name__)


async def get_all_users(db: AsyncSession, skip: int = 0, limit: int = 100):
    """
    List users, newest first.

    Args:
        db: Database session
        skip: Number of rows to skip
        limit: Maximum number of rows to return

    Returns:
        list[User]
    """
    result = await db.scalars(
        select(User).offset(skip).limit(limit).order_by(User.created_at.desc(), User.id.desc())
    )
    return result.all()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    return await db.scalar(select(User).where(User.username == username))


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    return await db.scalar(select(User).where(User.email == email.lower()))


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def require_user(db: AsyncSession, user_id: int) -> User:
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    firstname: str | None = None,
    lastname: str | None = None,
    role: UserRole = UserRole.USER,
) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        username: Unique username
        email: Unique email, stored lower-cased
        password: Plain password, stored as a bcrypt hash

    Returns:
        User: The created user

    Raises:
        ConflictError: username or email already taken
    """
    email = email.lower()
    if await get_user_by_email(db, email):
        logger.warning(f"⚠️ Attempt to register duplicate email: {email}")
        raise ConflictError("User with this email already exists")
    if await get_user_by_username(db, username):
        logger.warning(f"⚠️ Attempt to register duplicate username: {username}")
        raise ConflictError("User with this username already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        firstname=firstname,
        lastname=lastname,
        role=role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error(f"❌ IntegrityError creating user {username}: {e}")
        raise ConflictError("User with this username or email already exists")

    await db.refresh(user)
    logger.info(f"✅ User created: {user.id} - {user.username}")
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check the credentials of a user.

    Raises:
        AuthenticationError: unknown email, wrong password or deactivated account
    """
    user = await get_user_by_email(db, email)

    if not user:
        logger.warning(f"Login attempt for non-existent user: {email}")
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        logger.warning(f"Login attempt for deactivated user: {user.id}")
        raise AuthenticationError("Account is deactivated")

    if not verify_password(password, user.password_hash):
        logger.warning(f"Invalid password for user: {email}")
        raise AuthenticationError("Invalid credentials")

    logger.info(f"✅ User authenticated: {user.id} - {user.username}")
    return user


async def update_user(db: AsyncSession, user_id: int, user_update: UserUpdate) -> User:
    """
    Update the caller's own profile.

    Raises:
        NotFoundError: user does not exist
        LibraryValidationError: a new password was sent without the current one
        AuthenticationError: the current password is wrong
    """
    user = await require_user(db, user_id)

    data = user_update.model_dump(exclude_unset=True, exclude={"current_password"})
    if "password" in data and data["password"] is not None:
        if not user_update.current_password:
            raise LibraryValidationError("Current password is required to set a new one")
        if not verify_password(user_update.current_password, user.password_hash):
            logger.warning(f"Invalid current password for user {user_id}")
            raise AuthenticationError("Invalid current password")

    return await _apply_user_changes(db, user, data)


async def admin_update_user(db: AsyncSession, user_id: int, user_update: AdminUserUpdate) -> User:
    user = await require_user(db, user_id)
    data = user_update.model_dump(exclude_unset=True)
    return await _apply_user_changes(db, user, data)


async def _apply_user_changes(db: AsyncSession, user: User, data: dict) -> User:
    password = data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    if data.get("avatar") is not None:
        data["avatar"] = str(data["avatar"])
    for field in ("role", "is_active"):
        if field in data and data[field] is None:
            data.pop(field)
    for field, value in data.items():
        setattr(user, field, value)

    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"❌ Error updating user {user.id}: {e}")
        raise
    await db.refresh(user)
    logger.info(f"✅ User updated: {user.id} - {user.username}")
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """
    Delete a user together with their library entries.

    Books the user added stay in the catalog with ``added_by_id`` cleared.

    Raises:
        NotFoundError: user does not exist
    """
    user = await require_user(db, user_id)
    try:
        # Books stay shared, only the authorship link goes
        await db.execute(
            update(Book).where(Book.added_by_id == user_id).values(added_by_id=None)
        )
        await db.delete(user)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"❌ Error deleting user {user_id}: {e}")
        raise
    logger.info(f"✅ User deleted: {user_id}")
