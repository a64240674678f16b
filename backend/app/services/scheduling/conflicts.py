# backend/app/services/scheduling/conflicts.py
"""
Occupied time ranges of a day and the overlap test against them.

Ranges are half-open [start, end) in minutes since midnight.
"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from .config import OCCUPYING_STATUSES, time_str_to_minutes

logger = logging.getLogger(__name__)


def occupied_ranges(db: Session, target_date: date) -> list[tuple[int, int]]:
    """Get [start, end) ranges of all occupying bookings on target_date, sorted by start."""
    ranges: list[tuple[int, int]] = []

    for booking in _get_occupying_bookings(db, target_date):
        try:
            start = time_str_to_minutes(booking.start_time)
        except (ValueError, AttributeError):
            logger.error(
                f"Booking {booking.id} has unparsable start_time={booking.start_time!r}, "
                f"its range is not counted as occupied"
            )
            continue
        ranges.append((start, start + booking.duration_minutes))

    ranges.sort()
    return ranges


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


def fits(start: int, duration_min: int, occupied: Iterable[tuple[int, int]]) -> bool:
    """True iff [start, start + duration) overlaps none of the occupied ranges."""
    end = start + duration_min
    return not any(overlaps(start, end, occ_start, occ_end) for occ_start, occ_end in occupied)


# ── Database helpers ─────────────────────────────────────────────────────


def _get_occupying_bookings(db: Session, target_date: date) -> list:
    """Get bookings on date whose status blocks their time range."""
    from ...models.generated import Bookings

    return (
        db.query(Bookings)
        .filter(
            Bookings.date == target_date.isoformat(),
            Bookings.status.in_(OCCUPYING_STATUSES),
        )
        .all()
    )
