import pytest

from app.services.scheduling.config import SchedulingConfig, minutes_to_time_str, time_str_to_minutes
from app.services.scheduling.conflicts import fits, overlaps
from app.services.scheduling.generator import candidate_starts, grid_cells

OPEN, CLOSE = 9 * 60, 21 * 60


def test_candidate_starts_cover_shop_day():
    starts = list(candidate_starts(OPEN, CLOSE, 420, 30))

    assert starts[0] == OPEN
    assert starts[-1] == CLOSE - 420
    assert len(starts) == 11
    assert all(t % 30 == 0 for t in starts)


def test_candidate_starts_is_restartable():
    assert list(candidate_starts(OPEN, CLOSE, 90, 30)) == list(candidate_starts(OPEN, CLOSE, 90, 30))


def test_non_aligned_duration_is_rounded_up():
    starts = list(candidate_starts(OPEN, CLOSE, 100, 30))

    # 100 min occupies a 120 min block
    assert starts[-1] == CLOSE - 120


def test_unaligned_open_starts_on_next_grid_line():
    starts = list(candidate_starts(9 * 60 + 5, CLOSE, 60, 30))

    assert starts[0] == 9 * 60 + 30


def test_block_longer_than_day_has_no_candidates():
    assert list(candidate_starts(OPEN, CLOSE, 13 * 60, 30)) == []


def test_whole_day_block_has_single_candidate():
    assert list(candidate_starts(OPEN, CLOSE, 12 * 60, 30)) == [OPEN]


def test_candidate_starts_rejects_non_positive_duration():
    with pytest.raises(ValueError):
        list(candidate_starts(OPEN, CLOSE, 0, 30))


def test_overlap_is_half_open():
    assert overlaps(600, 720, 660, 780)
    assert overlaps(600, 720, 600, 630)
    assert not overlaps(600, 720, 720, 780)
    assert not overlaps(540, 600, 600, 720)


def test_fits_against_occupied_ranges():
    occupied = [(600, 720), (900, 960)]

    assert fits(540, 60, occupied)
    assert fits(720, 180, occupied)
    assert not fits(540, 90, occupied)
    assert not fits(690, 30, occupied)
    assert not fits(840, 61, occupied)
    assert fits(960, 120, occupied)
    assert fits(600, 60, [])


def test_grid_cells():
    assert grid_cells(600, 90, 30) == [600, 630, 660]
    assert grid_cells(600, 100, 30) == [600, 630, 660, 690]
    assert grid_cells(540, 60, 60) == [540]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("09:00", 540),
        ("9:00", 540),
        ("21:00", 1260),
        ("24:00", 1440),
        ("9:00 AM", 540),
        ("12:00 PM", 720),
        ("12:30 AM", 30),
        ("1:30 pm", 810),
    ],
)
def test_time_str_to_minutes(value, expected):
    assert time_str_to_minutes(value) == expected


@pytest.mark.parametrize("value", ["25:00", "9:60", "24:30", "13:00 PM", "noon", ""])
def test_time_str_to_minutes_rejects_invalid(value):
    with pytest.raises(ValueError):
        time_str_to_minutes(value)


def test_minutes_to_time_str():
    assert minutes_to_time_str(540) == "09:00"
    assert minutes_to_time_str(1290) == "21:30"


def test_scheduling_config_validation():
    with pytest.raises(ValueError):
        SchedulingConfig(slot_step_minutes=20)
    with pytest.raises(ValueError):
        SchedulingConfig(shop_open=21 * 60, shop_close=9 * 60)
    with pytest.raises(ValueError):
        SchedulingConfig(default_duration_minutes=0)

    config = SchedulingConfig()
    assert config.shop_day_minutes == 720
    assert (config.shop_open_str, config.shop_close_str) == ("09:00", "21:00")
