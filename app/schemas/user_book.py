from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enum import ReadingStatus
from app.schemas.base import BaseSchema, as_utc


class AddBookToLibrary(BaseSchema):
    """Add a Google Books volume to the caller's library"""
    google_books_id: str = Field(
        ..., min_length=1, max_length=64,
        description="Google Books volume ID (obtained from books search)",
    )
    status: ReadingStatus | None = Field(None, description="Initial reading status")
    is_favorite: bool | None = Field(None, description="Mark book as favorite")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "google_books_id": "dNJzDwAAQBAJ",
                "status": "WANT_TO_READ",
                "is_favorite": False,
            }
        }
    )


class UpdateProgress(BaseSchema):
    """
    Partial update of a library entry.

    Only the fields present in the request body are applied, see
    ``ProgressUpdate.from_schema``.
    """
    current_page: int | None = Field(None, ge=0, description="Current page number")
    status: ReadingStatus | None = Field(None, description="Reading status")
    rating: int | None = Field(None, ge=1, le=5, description="Rating from 1 to 5 stars")
    review: str | None = Field(None, max_length=5000, description="User review of the book")
    is_favorite: bool | None = Field(None, description="Mark book as favorite")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "current_page": 150,
                "status": "READING",
                "rating": 4,
                "review": "Great book! Really enjoyed the character development.",
                "is_favorite": True,
            }
        }
    )


class BookInfoOut(BaseModel):
    id: int
    google_books_id: str
    title: str
    author: str
    isbn: str | None
    description: str | None
    cover_url: str | None
    total_pages: int
    language: str | None
    publisher: str | None
    published_date: date | None
    genres: list[str]

    model_config = ConfigDict(from_attributes=True)


class UserBookOut(BaseModel):
    id: int
    user_id: int
    book_id: int
    status: ReadingStatus
    current_page: int
    rating: int | None
    review: str | None
    is_favorite: bool
    started_at: datetime | None
    finished_at: datetime | None
    created_at: datetime
    updated_at: datetime
    book: BookInfoOut
    progress_percentage: int = Field(..., description="Reading progress percentage")

    @field_validator("started_at", "finished_at", "created_at", "updated_at")
    @classmethod
    def timestamps_in_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class LibraryPage(BaseModel):
    books: list[UserBookOut]
    total: int
    page: int
    total_pages: int


class LibraryStats(BaseModel):
    total_books: int = Field(..., description="Total books in library")
    want_to_read: int
    currently_reading: int
    finished: int
    paused: int
    did_not_finish: int
    by_status: dict[ReadingStatus, int]
    favorites: int
    average_rating: float
    total_pages_read: int = Field(..., description="Sum of current pages over the whole library")


class RemovedOut(BaseModel):
    message: str = "Book removed from library successfully"
