"""
Reading-progress rules.

Everything here is pure: the functions take the stored state of a library
entry plus an immutable ``ProgressUpdate`` and return the column changes to
write. The rules run in a fixed order:

1. ``derive_from_page``      - status implied by the new current page
2. ``apply_explicit_status`` - a status sent by the caller overrides step 1
3. ``apply_annotations``     - rating / review / favorite copied as is
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Final

from app.models.enum import ReadingStatus


class _Unset:
    """Marker for a field that was not sent at all (as opposed to null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


def is_set(value: Any) -> bool:
    return value is not UNSET


@dataclass(frozen=True)
class ProgressUpdate:
    current_page: int | _Unset = UNSET
    status: ReadingStatus | _Unset = UNSET
    rating: int | None | _Unset = UNSET
    review: str | None | _Unset = UNSET
    is_favorite: bool | _Unset = UNSET

    # null is meaningful only for these; for the others it means "not sent"
    NULLABLE = ("rating", "review")

    @classmethod
    def from_schema(cls, data) -> "ProgressUpdate":
        """Build from a pydantic ``UpdateProgress`` using the fields actually sent."""
        values = {}
        for name in data.model_fields_set:
            value = getattr(data, name)
            if value is None and name not in cls.NULLABLE:
                continue
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class ProgressState:
    """The stored columns the rules depend on."""

    status: ReadingStatus
    current_page: int
    started_at: datetime | None
    finished_at: datetime | None


def progress_percentage(current_page: int, total_pages: int) -> int:
    """round(current / total * 100), half-up; 0 when the book has no page count."""
    if not total_pages or total_pages <= 0:
        return 0
    ratio = Decimal(current_page) * 100 / Decimal(total_pages)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_rating(value: float | Decimal | None) -> float:
    """Average rating with one decimal, 0 when nobody rated anything."""
    if value is None:
        return 0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def exceeds_total_pages(update: ProgressUpdate, total_pages: int) -> bool:
    return is_set(update.current_page) and update.current_page > total_pages


def derive_from_page(
    state: ProgressState, update: ProgressUpdate, total_pages: int, now: datetime
) -> dict[str, Any]:
    if not is_set(update.current_page):
        return {}

    page = update.current_page
    changes: dict[str, Any] = {"current_page": page}
    if page == 0:
        changes["status"] = ReadingStatus.WANT_TO_READ
        changes["started_at"] = None
    elif total_pages > 0 and page >= total_pages:
        changes["status"] = ReadingStatus.FINISHED
        changes["finished_at"] = now
    elif state.status == ReadingStatus.WANT_TO_READ:
        changes["status"] = ReadingStatus.READING
        changes["started_at"] = now
    return changes


def apply_explicit_status(
    state: ProgressState,
    update: ProgressUpdate,
    total_pages: int,
    now: datetime,
    changes: dict[str, Any],
) -> dict[str, Any]:
    if not is_set(update.status):
        return changes

    changes = dict(changes)
    status = update.status
    changes["status"] = status
    page_sent = is_set(update.current_page)

    if status == ReadingStatus.READING:
        started_at = changes.get("started_at", state.started_at)
        if started_at is None:
            changes["started_at"] = now
    elif status == ReadingStatus.FINISHED:
        changes["finished_at"] = now
        if not page_sent:
            changes["current_page"] = total_pages
    elif status == ReadingStatus.WANT_TO_READ:
        changes["started_at"] = None
        changes["finished_at"] = None
        if not page_sent:
            changes["current_page"] = 0
    return changes


def apply_annotations(update: ProgressUpdate, changes: dict[str, Any]) -> dict[str, Any]:
    changes = dict(changes)
    for name in ("rating", "review", "is_favorite"):
        value = getattr(update, name)
        if is_set(value):
            changes[name] = value
    return changes


def plan_progress_update(
    state: ProgressState, update: ProgressUpdate, total_pages: int, now: datetime
) -> dict[str, Any]:
    """All column changes for one update, derived fields included."""
    changes = derive_from_page(state, update, total_pages, now)
    changes = apply_explicit_status(state, update, total_pages, now, changes)
    return apply_annotations(update, changes)
