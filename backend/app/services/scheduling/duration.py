# backend/app/services/scheduling/duration.py
"""Total duration of a service selection."""

from math import ceil
from typing import Iterable

from .catalog import Service


def total_duration_minutes(services: Iterable[Service]) -> int:
    """
    Sum of service durations, in minutes.

    Call only on a selection that already passed compatibility validation.
    """
    return sum(service.duration_minutes for service in services)


def round_up_to_step(minutes: int, step: int) -> int:
    """Round a duration up to the next multiple of the slot grid step."""
    return ceil(minutes / step) * step
