from datetime import datetime, timezone

from app.database.db import Base
from sqlalchemy import Column, String, Integer, Text, Date, DateTime, JSON, ForeignKey


# ---------- Book ---------- #
class Book(Base):
    """A Google Books volume materialised locally the first time somebody adds it."""

    __tablename__ = "book"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    google_books_id = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    isbn = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    cover_url = Column(String, nullable=True)
    publisher = Column(String, nullable=True)
    published_date = Column(Date, nullable=True)
    language = Column(String, nullable=True)
    total_pages = Column(Integer, nullable=False, default=0)
    genres = Column(JSON, nullable=False, default=list)
    catalog_snapshot = Column(JSON, nullable=True)  # CatalogSnapshot.model_dump(mode="json")

    added_by_id = Column(
        Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
