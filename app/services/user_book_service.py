import math
from datetime import datetime, timezone

from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
import logging

from app.core.exceptions import ConflictError, LibraryValidationError, NotFoundError
from app.models import UserBook
from app.models.enum import ReadingStatus
from app.schemas.user_book import (
    AddBookToLibrary,
    BookInfoOut,
    LibraryPage,
    LibraryStats,
    UpdateProgress,
    UserBookOut,
)
from app.services.book_service import materialize_book
from app.services.catalog_client import GoogleBooksClient
from app.services.progress import (
    ProgressState,
    ProgressUpdate,
    exceeds_total_pages,
    plan_progress_update,
    progress_percentage,
    round_rating,
)

logger = logging.getLogger(__name__)

NOT_IN_LIBRARY = "Book not found in your library"
ALREADY_IN_LIBRARY = "Book already exists in your library"


def to_user_book_out(user_book: UserBook) -> UserBookOut:
    """Joined Book + membership view; the percentage is computed on every read."""
    book = user_book.book
    return UserBookOut(
        id=user_book.id,
        user_id=user_book.user_id,
        book_id=user_book.book_id,
        status=user_book.status,
        current_page=user_book.current_page,
        rating=user_book.rating,
        review=user_book.review,
        is_favorite=user_book.is_favorite,
        started_at=user_book.started_at,
        finished_at=user_book.finished_at,
        created_at=user_book.created_at,
        updated_at=user_book.updated_at,
        book=BookInfoOut.model_validate(book),
        progress_percentage=progress_percentage(user_book.current_page, book.total_pages),
    )


async def find_user_book(db: AsyncSession, user_id: int, book_id: int) -> UserBook | None:
    return await db.scalar(
        select(UserBook)
        .options(joinedload(UserBook.book))
        .where((UserBook.user_id == user_id) & (UserBook.book_id == book_id))
        .execution_options(populate_existing=True)
    )


async def _require_user_book(db: AsyncSession, user_id: int, book_id: int) -> UserBook:
    user_book = await find_user_book(db, user_id, book_id)
    if not user_book:
        raise NotFoundError(NOT_IN_LIBRARY)
    return user_book


async def add_book_to_library(
    db: AsyncSession, catalog: GoogleBooksClient, user_id: int, data: AddBookToLibrary
) -> UserBookOut:
    """
    Add a Google Books volume to the user's library.

    The local Book is created the first time anybody adds the volume and
    reused afterwards.

    Raises:
        ConflictError: the book is already in this user's library
        CatalogNotFoundError: unknown volume id
        UpstreamError / UpstreamTimeoutError: Google Books failure
    """
    book = await materialize_book(db, catalog, data.google_books_id, user_id)
    book_id = book.id

    if await find_user_book(db, user_id, book_id):
        logger.warning(f"⚠️ Book {book_id} is already in the library of user {user_id}")
        raise ConflictError(ALREADY_IN_LIBRARY)

    status = data.status or ReadingStatus.WANT_TO_READ
    user_book = UserBook(
        user_id=user_id,
        book_id=book_id,
        status=status,
        current_page=0,
        is_favorite=bool(data.is_favorite),
        started_at=datetime.now(timezone.utc) if status == ReadingStatus.READING else None,
    )
    db.add(user_book)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"⚠️ Concurrent add of book {book_id} for user {user_id}")
        raise ConflictError(ALREADY_IN_LIBRARY)

    logger.info(f"✅ Book {book_id} added to the library of user {user_id} ({status.value})")
    return to_user_book_out(await _require_user_book(db, user_id, book_id))


async def get_user_library(
    db: AsyncSession,
    user_id: int,
    status: ReadingStatus | None = None,
    is_favorite: bool | None = None,
    page: int = 1,
    limit: int = 20,
) -> LibraryPage:
    """
    One page of the user's library, most recently updated first.

    Args:
        status: keep only entries with this reading status
        is_favorite: keep only favorites (True) or non-favorites (False)
        page: 1-based page number
        limit: page size
    """
    conditions = [UserBook.user_id == user_id]
    if status is not None:
        conditions.append(UserBook.status == status)
    if is_favorite is not None:
        conditions.append(UserBook.is_favorite == is_favorite)

    total = await db.scalar(select(func.count(UserBook.id)).where(*conditions))
    rows = await db.scalars(
        select(UserBook)
        .options(joinedload(UserBook.book))
        .where(*conditions)
        .order_by(UserBook.updated_at.desc(), UserBook.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return LibraryPage(
        books=[to_user_book_out(ub) for ub in rows.unique().all()],
        total=total or 0,
        page=page,
        total_pages=math.ceil((total or 0) / limit),
    )


async def get_user_book(db: AsyncSession, user_id: int, book_id: int) -> UserBookOut:
    return to_user_book_out(await _require_user_book(db, user_id, book_id))


async def update_progress(
    db: AsyncSession, user_id: int, book_id: int, data: UpdateProgress
) -> UserBookOut:
    """
    Apply a partial progress update.

    Status and timestamps are derived by ``plan_progress_update``; the
    result is written in a single UPDATE.

    Raises:
        NotFoundError: the book is not in the user's library
        LibraryValidationError: current page beyond the book's page count
    """
    user_book = await _require_user_book(db, user_id, book_id)
    total_pages = user_book.book.total_pages
    update = ProgressUpdate.from_schema(data)

    if exceeds_total_pages(update, total_pages):
        raise LibraryValidationError(
            f"Current page cannot exceed total pages ({total_pages})"
        )

    state = ProgressState(
        status=user_book.status,
        current_page=user_book.current_page,
        started_at=user_book.started_at,
        finished_at=user_book.finished_at,
    )
    changes = plan_progress_update(state, update, total_pages, datetime.now(timezone.utc))

    if changes:
        for field, value in changes.items():
            setattr(user_book, field, value)
        # re-sent values produce no UPDATE, the request still counts as activity
        user_book.updated_at = datetime.now(timezone.utc)
        try:
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"❌ Error updating progress of book {book_id} for user {user_id}: {e}")
            raise
        logger.info(
            f"✅ Progress updated: user={user_id} book={book_id} fields={sorted(changes)}"
        )

    return to_user_book_out(await _require_user_book(db, user_id, book_id))


async def remove_book_from_library(db: AsyncSession, user_id: int, book_id: int) -> None:
    """Delete the membership only; the Book itself is shared and stays."""
    await _require_user_book(db, user_id, book_id)
    result = await db.execute(
        delete(UserBook).where((UserBook.user_id == user_id) & (UserBook.book_id == book_id))
    )
    await db.commit()
    if result.rowcount == 0:
        # removed by a parallel request after our lookup
        raise NotFoundError(NOT_IN_LIBRARY)
    logger.info(f"✅ Book {book_id} removed from the library of user {user_id}")


async def get_library_stats(db: AsyncSession, user_id: int) -> LibraryStats:
    """
    Aggregate statistics in one query.

    ``total_pages_read`` is the sum of current pages over every entry,
    whatever its status.
    """
    status_columns = [
        func.coalesce(func.sum(case((UserBook.status == s, 1), else_=0)), 0).label(s.value)
        for s in ReadingStatus
    ]
    row = (
        await db.execute(
            select(
                func.count(UserBook.id).label("total"),
                func.coalesce(func.sum(case((UserBook.is_favorite.is_(True), 1), else_=0)), 0).label(
                    "favorites"
                ),
                func.avg(UserBook.rating).label("average_rating"),
                func.coalesce(func.sum(UserBook.current_page), 0).label("pages"),
                *status_columns,
            ).where(UserBook.user_id == user_id)
        )
    ).one()

    by_status = {s: int(row._mapping[s.value]) for s in ReadingStatus}
    return LibraryStats(
        total_books=row.total,
        **{s.stats_key: count for s, count in by_status.items()},
        by_status=by_status,
        favorites=int(row.favorites),
        average_rating=round_rating(row.average_rating),
        total_pages_read=int(row.pages),
    )
