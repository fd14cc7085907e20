from datetime import datetime, timezone

from app.database.db import Base
from sqlalchemy import (
    Column,
    Integer,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from app.models.enum import ReadingStatus


class UserBook(Base):
    """Reading progress of one user for one book"""

    __tablename__ = "user_book"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_user_book"),
        CheckConstraint("current_page >= 0", name="ck_user_book_current_page"),
        CheckConstraint(
            "rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_user_book_rating"
        ),
        Index("ix_user_book_user_updated", "user_id", "updated_at"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    book_id = Column(Integer, ForeignKey("book.id"), nullable=False, index=True)
    status = Column(
        SQLEnum(ReadingStatus, name="reading_status"),
        nullable=False,
        default=ReadingStatus.WANT_TO_READ,
    )
    current_page = Column(Integer, nullable=False, default=0)
    rating = Column(Integer, nullable=True)
    review = Column(Text, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # 🔗 relationships
    user = relationship("User", back_populates="user_books")
    book = relationship("Book", lazy="joined")
