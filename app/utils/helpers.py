import re
from datetime import date

from app.schemas.catalog import IndustryIdentifier

UNKNOWN_AUTHOR = "Unknown Author"

_PUBLISHED_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{2}))?(?:-(\d{2}))?")


def join_authors(authors: list[str] | None) -> str:
    """['A', 'B'] -> 'A, B'; empty list -> 'Unknown Author'."""
    names = [a.strip() for a in authors or [] if a and a.strip()]
    return ", ".join(names) or UNKNOWN_AUTHOR


def pick_isbn(identifiers: list[IndustryIdentifier] | None) -> str | None:
    """Prefer ISBN_13, fall back to ISBN_10; other identifier types are ignored."""
    by_type = {i.type: i.identifier for i in reversed(identifiers or [])}
    return by_type.get("ISBN_13") or by_type.get("ISBN_10")


def parse_published_date(value: str | None) -> date | None:
    """Google Books dates come as 'YYYY', 'YYYY-MM' or 'YYYY-MM-DD'."""
    if not value:
        return None
    match = _PUBLISHED_DATE_RE.match(value.strip())
    if not match:
        return None
    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        return None


def build_advanced_query(
    title: str | None = None,
    author: str | None = None,
    publisher: str | None = None,
    subject: str | None = None,
    isbn: str | None = None,
) -> str:
    """Compose a Google Books query out of field-specific keywords."""
    parts = []
    if title:
        parts.append(f'intitle:"{title}"')
    if author:
        parts.append(f'inauthor:"{author}"')
    if publisher:
        parts.append(f'inpublisher:"{publisher}"')
    if subject:
        parts.append(f'subject:"{subject}"')
    if isbn:
        parts.append(f"isbn:{isbn}")
    return " ".join(parts)
