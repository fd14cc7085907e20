from typing import Annotated, Literal
from fastapi import APIRouter, Depends, Query

from app.schemas.catalog import SearchResponse, Volume
from app.services import book_service
from app.services.catalog_client import GoogleBooksClient, get_catalog_client


router = APIRouter(prefix="/books", tags=["Books (Google Books)"])
CatalogType = Annotated[GoogleBooksClient, Depends(get_catalog_client)]


@router.get("/search",
            response_model=SearchResponse,
            summary="Search books in Google Books")
async def search(
    catalog: CatalogType,
    q: Annotated[str, Query(min_length=1, description="Search query")],
    max_results: Annotated[int, Query(ge=1, le=40)] = 10,
    start_index: Annotated[int, Query(ge=0)] = 0,
    lang_restrict: str | None = None,
    print_type: Literal["all", "books", "magazines"] | None = None,
    order_by: Literal["relevance", "newest"] | None = None,
    filter: Literal["partial", "full", "free-ebooks", "paid-ebooks", "ebooks"] | None = None,
):
    """Search the catalog. Use a result's `id` as `google_books_id` to add it to your library."""
    return await book_service.search_books(
        catalog,
        q,
        max_results=max_results,
        start_index=start_index,
        lang_restrict=lang_restrict,
        print_type=print_type,
        order_by=order_by,
        filter=filter,
    )


@router.get("/advanced-search",
            response_model=SearchResponse,
            summary="Search by title, author, publisher, subject or ISBN")
async def advanced_search(
    catalog: CatalogType,
    title: str | None = None,
    author: str | None = None,
    publisher: str | None = None,
    subject: str | None = None,
    isbn: str | None = None,
    max_results: Annotated[int, Query(ge=1, le=40)] = 10,
    start_index: Annotated[int, Query(ge=0)] = 0,
):
    return await book_service.advanced_search_books(
        catalog,
        title=title,
        author=author,
        publisher=publisher,
        subject=subject,
        isbn=isbn,
        max_results=max_results,
        start_index=start_index,
    )


@router.get("/{volume_id}",
            response_model=Volume,
            summary="Get a Google Books volume")
async def get_volume(catalog: CatalogType, volume_id: str):
    return await book_service.get_catalog_book(catalog, volume_id)
