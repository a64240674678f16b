# backend/app/services/scheduling/generator.py
"""
Candidate start times for a block of a given length.

Pure functions, no state: the sequence is regenerated for every request.
"""

from typing import Iterator

from .duration import round_up_to_step


def candidate_starts(
    shop_open: int,
    shop_close: int,
    duration_min: int,
    step: int,
) -> Iterator[int]:
    """
    Yield every grid-aligned start t with shop_open <= t and
    t + duration <= shop_close.

    Alignment is to multiples of `step` from midnight; the duration is
    rounded up to the grid first so a block never ends between grid lines.
    """
    if duration_min <= 0:
        raise ValueError(f"duration must be positive, got {duration_min}")

    block = round_up_to_step(duration_min, step)
    t = round_up_to_step(shop_open, step)

    while t + block <= shop_close:
        yield t
        t += step


def grid_cells(start: int, duration_min: int, step: int) -> list[int]:
    """Grid cells (cell start minutes) covered by [start, start + duration)."""
    block = round_up_to_step(duration_min, step)
    first = start - start % step
    return list(range(first, start + block, step))
