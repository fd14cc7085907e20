from typing import Annotated
from fastapi import APIRouter, Depends, Query, status

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.auth import CurrentUser
from app.database.db_depends import get_db
from app.models.enum import ReadingStatus
from app.schemas.user_book import (
    AddBookToLibrary,
    LibraryPage,
    LibraryStats,
    RemovedOut,
    UpdateProgress,
    UserBookOut,
)
from app.services import user_book_service
from app.services.catalog_client import GoogleBooksClient, get_catalog_client

router = APIRouter(prefix="/user-books", tags=["My library"])

DBType = Annotated[AsyncSession, Depends(get_db)]
CatalogType = Annotated[GoogleBooksClient, Depends(get_catalog_client)]


@router.post(
    "",
    response_model=UserBookOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a Google Books volume to my library",
)
async def add_book(db: DBType, catalog: CatalogType, data: AddBookToLibrary, current_user: CurrentUser):
    """
    Add a book to your library.

    - **google_books_id**: volume id from `/books/search`
    - **status**: initial status, `WANT_TO_READ` by default
    - **is_favorite**: optional
    """
    return await user_book_service.add_book_to_library(db, catalog, current_user.id, data)


@router.get("",
            response_model=LibraryPage,
            summary="List my library")
async def list_books(
    db: DBType,
    current_user: CurrentUser,
    status: ReadingStatus | None = None,
    is_favorite: bool | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    return await user_book_service.get_user_library(
        db, current_user.id, status=status, is_favorite=is_favorite, page=page, limit=limit
    )


@router.get("/stats",
            response_model=LibraryStats,
            summary="Statistics of my library")
async def get_stats(db: DBType, current_user: CurrentUser):
    return await user_book_service.get_library_stats(db, current_user.id)


@router.get("/{book_id}",
            response_model=UserBookOut,
            summary="Get a book from my library")
async def get_book(db: DBType, book_id: int, current_user: CurrentUser):
    return await user_book_service.get_user_book(db, current_user.id, book_id)


@router.patch("/{book_id}/progress",
              response_model=UserBookOut,
              summary="Update reading progress")
async def update_progress(db: DBType, book_id: int, data: UpdateProgress, current_user: CurrentUser):
    """
    Only the fields you send are changed.

    - **current_page** `0` resets the book to `WANT_TO_READ`
    - **current_page** equal to the page count marks it `FINISHED`
    - an explicit **status** wins over the one derived from the page
    - **rating** / **review** `null` clears them
    """
    return await user_book_service.update_progress(db, current_user.id, book_id, data)


@router.delete("/{book_id}",
               response_model=RemovedOut,
               summary="Remove a book from my library")
async def remove_book(db: DBType, book_id: int, current_user: CurrentUser):
    await user_book_service.remove_book_from_library(db, current_user.id, book_id)
    return RemovedOut()
