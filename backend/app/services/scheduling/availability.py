# backend/app/services/scheduling/availability.py
"""
Availability service: the scheduler's public operations.

- validate_services: is this combination allowed, and how long is it?
- available_slots:   start times on a day where the whole block fits
- create_booking:    authoritative re-check, then insert
- cancel_booking:    free the slot again

The read path is advisory: slots a client saw may be stale by the time it
books. create_booking re-checks against a fresh read and the store's
UNIQUE(date, cell) constraint has the final word.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Sequence
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import settings
from ...models.generated import Bookings
from ..events import emit_event
from . import store
from .catalog import Service, ServiceCatalog, get_service_catalog
from .config import SchedulingConfig, get_scheduling_config, minutes_to_time_str, time_str_to_minutes
from .conflicts import fits, occupied_ranges
from .duration import round_up_to_step, total_duration_minutes
from .errors import (
    BookingNotCancellable,
    BookingNotFound,
    DateInPast,
    DurationExceedsShopHours,
    IncompatibleCombination,
    InvalidTimeSlot,
    MalformedRequest,
    SchedulingError,
    SlotNoLongerAvailable,
)
from .generator import candidate_starts
from .rules import CompatibilityRuleSet, get_rule_set

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = ("pending", "confirmed")


@dataclass(frozen=True)
class ValidationVerdict:
    valid: bool
    total_duration_minutes: int | None = None
    error: str | None = None
    code: str | None = None

    @property
    def total_duration_hours(self) -> float | None:
        if self.total_duration_minutes is None:
            return None
        return self.total_duration_minutes / 60


@dataclass(frozen=True)
class Slot:
    start: int
    end: int

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> str:
        return minutes_to_time_str(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_time_str(self.end)


@dataclass(frozen=True)
class AvailableSlots:
    date: date
    total_duration_minutes: int
    legacy: bool
    slots: list[Slot] = field(default_factory=list)


def shop_now() -> datetime:
    """Current shop-local wall-clock time (naive)."""
    if settings.shop_timezone:
        return datetime.now(ZoneInfo(settings.shop_timezone)).replace(tzinfo=None)
    return datetime.now()


class AvailabilityService:
    """
    Orchestrates catalog, rules, slot generation and conflict checks.

    Catalog, rules and config are read-only and shared across requests;
    `clock` returns shop-local "now" and is injectable for tests.
    """

    def __init__(
        self,
        db: Session,
        catalog: ServiceCatalog | None = None,
        rules: CompatibilityRuleSet | None = None,
        config: SchedulingConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.catalog = catalog or get_service_catalog()
        self.rules = rules or get_rule_set()
        self.config = config or get_scheduling_config()
        self.clock = clock or shop_now

    # ── Validation ───────────────────────────────────────────────────────

    def validate_services(self, service_ids: Sequence[str]) -> ValidationVerdict:
        """Validate a combination and compute its total duration. Never raises SchedulingError."""
        try:
            services = self._check_selection(service_ids)
        except SchedulingError as e:
            return ValidationVerdict(valid=False, error=e.message, code=e.code)

        return ValidationVerdict(valid=True, total_duration_minutes=total_duration_minutes(services))

    def _check_selection(self, service_ids: Sequence[str]) -> tuple[Service, ...]:
        """Resolve and validate a non-empty selection, raising on any problem."""
        if not service_ids:
            raise MalformedRequest("At least one service is required")

        result = self.rules.validate(service_ids)
        if not result.valid:
            raise IncompatibleCombination(result.reason, result.pair)

        services = self.catalog.resolve(service_ids)
        duration = total_duration_minutes(services)
        if round_up_to_step(duration, self.config.slot_step_minutes) > self.config.shop_day_minutes:
            raise DurationExceedsShopHours(
                f"Total service duration ({_hours(duration)} hours) exceeds "
                f"maximum shop hours ({_hours(self.config.shop_day_minutes)} hours)"
            )
        return services

    # ── Slots ────────────────────────────────────────────────────────────

    def available_slots(self, target_date: date, service_ids: Sequence[str]) -> AvailableSlots:
        """
        List start times on target_date where the selection fits.

        Empty service_ids → legacy mode with the default block length.
        Raises DateInPast, UnknownService, IncompatibleCombination,
        DurationExceedsShopHours.
        """
        now = self.clock()
        self._ensure_not_past(target_date, now)

        legacy = not service_ids
        if legacy:
            duration = self.config.default_duration_minutes
        else:
            duration = total_duration_minutes(self._check_selection(service_ids))

        block = round_up_to_step(duration, self.config.slot_step_minutes)
        occupied = occupied_ranges(self.db, target_date)

        slots = [
            Slot(start=start, end=start + block)
            for start in self._open_starts(target_date, block, now)
            if fits(start, block, occupied)
        ]

        return AvailableSlots(
            date=target_date,
            total_duration_minutes=block,
            legacy=legacy,
            slots=slots,
        )

    def _open_starts(self, target_date: date, block: int, now: datetime) -> list[int]:
        """Candidate starts within shop hours that have not already passed."""
        starts = candidate_starts(
            self.config.shop_open,
            self.config.shop_close,
            block,
            self.config.slot_step_minutes,
        )
        if target_date != now.date():
            return list(starts)

        day_start = datetime.combine(target_date, time.min)
        return [t for t in starts if day_start + timedelta(minutes=t) >= now]

    def _ensure_not_past(self, target_date: date, now: datetime) -> None:
        if target_date < now.date():
            raise DateInPast(f"Date {target_date.isoformat()} is in the past")

    # ── Write path ───────────────────────────────────────────────────────

    def create_booking(
        self,
        target_date: date,
        start_time: str,
        service_ids: Sequence[str],
        vehicle: str = "motorcycle",
        notes: str | None = None,
    ) -> Bookings:
        """
        Create a pending booking after re-checking the slot against the
        latest bookings.

        Raises MalformedRequest, DateInPast, InvalidTimeSlot,
        UnknownService, IncompatibleCombination, DurationExceedsShopHours,
        SlotNoLongerAvailable.
        """
        try:
            start = time_str_to_minutes(start_time)
        except ValueError:
            raise MalformedRequest(f"Invalid time slot: {start_time!r}") from None

        now = self.clock()
        self._ensure_not_past(target_date, now)
        if datetime.combine(target_date, time.min) + timedelta(minutes=start) < now:
            raise DateInPast(f"Time slot {minutes_to_time_str(start)} has already passed")

        services = self._check_selection(service_ids)
        block = round_up_to_step(total_duration_minutes(services), self.config.slot_step_minutes)

        candidates = candidate_starts(
            self.config.shop_open,
            self.config.shop_close,
            block,
            self.config.slot_step_minutes,
        )
        if start not in set(candidates):
            raise InvalidTimeSlot(
                f"A {_hours(block)}-hour booking cannot start at {minutes_to_time_str(start)}: "
                f"it must start on a {self.config.slot_step_minutes}-minute boundary and end by "
                f"{self.config.shop_close_str}"
            )

        # Fresh read right before the insert
        occupied = occupied_ranges(self.db, target_date)
        if not fits(start, block, occupied):
            logger.info(
                f"Slot taken before commit: date={target_date.isoformat()} "
                f"start={minutes_to_time_str(start)} duration={block}min"
            )
            raise SlotNoLongerAvailable()

        booking = store.insert_booking(
            self.db,
            target_date=target_date,
            start=start,
            duration_min=block,
            service_ids=[s.id for s in services],
            vehicle=vehicle,
            notes=notes,
            step=self.config.slot_step_minutes,
        )

        logger.info(
            f"Booking created: booking_id={booking.id}, date={booking.date}, "
            f"time={booking.start_time}-{booking.end_time}, services={[s.id for s in services]}"
        )

        emit_event("booking_created", {
            "booking_id": booking.id,
            "date": booking.date,
            "start_time": booking.start_time,
            "end_time": booking.end_time,
        })

        return booking

    def get_booking(self, booking_id: int) -> Bookings:
        booking = store.get_booking(self.db, booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def cancel_booking(self, booking_id: int) -> Bookings:
        """Cancel a pending/confirmed booking; its time range becomes bookable again."""
        booking = self.get_booking(booking_id)
        if booking.status not in CANCELLABLE_STATUSES:
            raise BookingNotCancellable(f"Cannot cancel a booking with status '{booking.status}'")

        booking = store.release_booking(self.db, booking, "cancelled")

        logger.info(f"Booking cancelled: booking_id={booking.id}, date={booking.date}, time={booking.start_time}")
        emit_event("booking_cancelled", {"booking_id": booking.id})

        return booking


def _hours(minutes: int) -> str:
    """Format minutes as hours: 420 → "7", 210 → "3.5"."""
    return f"{minutes / 60:g}"
