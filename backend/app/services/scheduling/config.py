# backend/app/services/scheduling/config.py
"""
Scheduling configuration and time-of-day helpers.

All times inside the scheduler are integer minutes since shop-local midnight.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from ...config import settings

OCCUPYING_STATUSES = ("pending", "confirmed", "completed", "no-show")
RELEASED_STATUSES = ("cancelled", "rejected")
BOOKING_STATUSES = OCCUPYING_STATUSES + RELEASED_STATUSES

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_AMPM_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Configuration for the single-bay scheduler.

    Attributes:
        shop_open: Opening time in minutes since midnight
        shop_close: Closing time in minutes since midnight
        slot_step_minutes: Grid step for start times and booking cells (15/30/60)
        default_duration_minutes: Block length for legacy requests without services
    """
    shop_open: int = 9 * 60
    shop_close: int = 21 * 60
    slot_step_minutes: int = 30
    default_duration_minutes: int = 60

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if not 0 <= self.shop_open < self.shop_close <= 24 * 60:
            raise ValueError(
                f"shop hours must satisfy 00:00 <= open < close <= 24:00, "
                f"got {minutes_to_time_str(self.shop_open)}-{minutes_to_time_str(self.shop_close)}"
            )
        if self.default_duration_minutes <= 0:
            raise ValueError("default_duration_minutes must be positive")

    @property
    def shop_day_minutes(self) -> int:
        return self.shop_close - self.shop_open

    @property
    def shop_open_str(self) -> str:
        return minutes_to_time_str(self.shop_open)

    @property
    def shop_close_str(self) -> str:
        return minutes_to_time_str(self.shop_close)


@lru_cache
def get_scheduling_config() -> SchedulingConfig:
    """Get scheduling configuration (singleton) built from settings."""
    return SchedulingConfig(
        shop_open=time_str_to_minutes(settings.shop_open),
        shop_close=time_str_to_minutes(settings.shop_close),
        slot_step_minutes=settings.slot_step_minutes,
        default_duration_minutes=settings.default_duration_minutes,
    )


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(value: str) -> int:
    """
    Parse a time of day into minutes since midnight.

    Accepts "HH:MM" (24h, "24:00" allowed as end of day) and the
    "h:MM AM/PM" form older clients send ("9:00 AM", "1:30 PM").
    Raises ValueError on anything else.
    """
    value = value.strip()

    match = _AMPM_RE.match(value)
    if match:
        hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if not 1 <= hour <= 12 or minute > 59:
            raise ValueError(f"Invalid time: {value!r}")
        if period == "PM" and hour != 12:
            hour += 12
        elif period == "AM" and hour == 12:
            hour = 0
        return hour * 60 + minute

    match = _HHMM_RE.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
            raise ValueError(f"Invalid time: {value!r}")
        return hour * 60 + minute

    raise ValueError(f"Invalid time: {value!r}")


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
