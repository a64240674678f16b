# backend/app/services/scheduling/store.py
"""
Booking writes.

The booking row and its grid cells are written in one transaction.
booking_cells carries UNIQUE(date, cell), so two bookings whose ranges
overlap can never both commit: the loser gets an IntegrityError, which is
reported as SlotNoLongerAvailable.

Cells of bookings that left an occupying status are purged in the same
transaction before the new cells go in, whoever changed the status.
"""

import json
import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models.generated import BookingCells, Bookings
from .config import OCCUPYING_STATUSES, minutes_to_time_str
from .errors import SlotNoLongerAvailable
from .generator import grid_cells

logger = logging.getLogger(__name__)


def insert_booking(
    db: Session,
    *,
    target_date: date,
    start: int,
    duration_min: int,
    service_ids: list[str],
    vehicle: str,
    notes: str | None,
    step: int,
) -> Bookings:
    """Insert a pending booking together with the cells it occupies."""
    date_str = target_date.isoformat()

    booking = Bookings(
        date=date_str,
        start_time=minutes_to_time_str(start),
        end_time=minutes_to_time_str(start + duration_min),
        duration_minutes=duration_min,
        services=json.dumps(service_ids),
        vehicle=vehicle,
        notes=notes,
        status="pending",
    )
    booking.cells = [
        BookingCells(date=date_str, cell=minutes_to_time_str(cell))
        for cell in grid_cells(start, duration_min, step)
    ]

    _purge_released_cells(db, date_str)
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            f"Booking cells already taken: date={date_str} "
            f"start={minutes_to_time_str(start)} duration={duration_min}min"
        )
        raise SlotNoLongerAvailable()

    db.refresh(booking)
    return booking


def release_booking(db: Session, booking: Bookings, status: str) -> Bookings:
    """Move booking to a non-occupying status and free its cells."""
    booking.status = status
    booking.updated_at = _utc_now_str()
    booking.cells.clear()

    db.commit()
    db.refresh(booking)
    return booking


def get_booking(db: Session, booking_id: int) -> Bookings | None:
    return db.get(Bookings, booking_id)


def _utc_now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _purge_released_cells(db: Session, date_str: str) -> None:
    """Delete cells on date still held by bookings that no longer occupy time."""
    released = select(Bookings.id).where(
        Bookings.date == date_str,
        Bookings.status.not_in(OCCUPYING_STATUSES),
    )
    purged = (
        db.query(BookingCells)
        .filter(BookingCells.date == date_str, BookingCells.booking_id.in_(released))
        .delete(synchronize_session="fetch")
    )
    if purged:
        logger.info(f"Released {purged} stale cells on {date_str}")
