from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.models import Book
from app.schemas.catalog import CatalogSnapshot, SearchResponse, Volume
from app.services.catalog_client import GoogleBooksClient
from app.utils.helpers import join_authors, parse_published_date, pick_isbn

logger = logging.getLogger(__name__)


async def search_books(
    catalog: GoogleBooksClient,
    query: str,
    max_results: int = 10,
    start_index: int = 0,
    **options,
) -> SearchResponse:
    """Search Google Books. Use the volume id from results to add books to a library."""
    return await catalog.search(
        query, max_results=max_results, start_index=start_index, **options
    )


async def advanced_search_books(catalog: GoogleBooksClient, **criteria) -> SearchResponse:
    return await catalog.advanced_search(**criteria)


async def get_catalog_book(catalog: GoogleBooksClient, volume_id: str) -> Volume:
    """Preview a Google Books volume before adding it."""
    return await catalog.get_by_id(volume_id)


async def get_book_by_id(db: AsyncSession, book_id: int) -> Book | None:
    return await db.get(Book, book_id)


async def get_book_by_google_id(db: AsyncSession, google_books_id: str) -> Book | None:
    return await db.scalar(select(Book).where(Book.google_books_id == google_books_id))


def book_from_volume(
    volume: Volume, added_by_id: int | None, google_books_id: str | None = None
) -> Book:
    """
    Map a catalog volume onto a new (not yet persisted) Book.

    Authors are flattened into one string, ISBN-13 wins over ISBN-10,
    a missing page count becomes 0 and missing categories an empty list.
    """
    info = volume.volume_info
    snapshot = CatalogSnapshot(fetched_at=datetime.now(timezone.utc), volume=volume)
    return Book(
        google_books_id=google_books_id or volume.id,
        title=info.title or "Untitled",
        author=join_authors(info.authors),
        isbn=pick_isbn(info.industry_identifiers),
        description=info.description,
        cover_url=info.image_links.thumbnail if info.image_links else None,
        publisher=info.publisher,
        published_date=parse_published_date(info.published_date),
        language=info.language,
        total_pages=max(info.page_count or 0, 0),
        genres=list(info.categories),
        catalog_snapshot=snapshot.model_dump(mode="json"),
        added_by_id=added_by_id,
    )


def load_snapshot(book: Book) -> CatalogSnapshot | None:
    """Typed view of the stored catalog payload."""
    if not book.catalog_snapshot:
        return None
    return CatalogSnapshot.model_validate(book.catalog_snapshot)


async def materialize_book(
    db: AsyncSession, catalog: GoogleBooksClient, google_books_id: str, user_id: int
) -> Book:
    """
    Return the local Book for a Google Books volume, creating it on first use.

    The Book is committed on its own: it is shared data, so it stays even if
    the caller's membership insert fails afterwards.

    Raises:
        CatalogNotFoundError: the volume does not exist in Google Books
        UpstreamError / UpstreamTimeoutError: Google Books is unavailable
    """
    book = await get_book_by_google_id(db, google_books_id)
    if book:
        return book

    volume = await catalog.get_by_id(google_books_id)
    book = book_from_volume(volume, added_by_id=user_id, google_books_id=google_books_id)
    db.add(book)
    try:
        await db.commit()
    except IntegrityError:
        # Another request created the same volume between our lookup and insert
        await db.rollback()
        logger.warning(f"⚠️ Book {google_books_id} was created concurrently, reusing it")
        book = await get_book_by_google_id(db, google_books_id)
        if book is None:
            raise
        return book

    logger.info(f"✅ Book created: {book.id} - {book.title}")
    return book
