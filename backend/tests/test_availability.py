import logging
from datetime import timedelta

import pytest

from app.models.generated import BookingCells, Bookings
from app.services.scheduling import AvailabilityService, SchedulingConfig
from app.services.scheduling.conflicts import occupied_ranges
from app.services.scheduling.errors import (
    BookingNotCancellable,
    BookingNotFound,
    DateInPast,
    IncompatibleCombination,
    InvalidTimeSlot,
    MalformedRequest,
    SlotNoLongerAvailable,
    UnknownService,
)

from helpers import ENGINE, INTERIOR, NOW, POWDER, SPA, TODAY, TOMORROW, UV, VIP, fixed_clock


def _times(result):
    return [(slot.start_time, slot.end_time) for slot in result.slots]


def test_seven_hour_combination_on_empty_calendar(service):
    result = service.available_slots(TOMORROW, [UV, INTERIOR, ENGINE])

    assert result.total_duration_minutes == 420
    assert result.legacy is False
    assert result.slots
    assert all(slot.end - slot.start == 420 for slot in result.slots)
    assert _times(result)[0] == ("09:00", "16:00")
    assert _times(result)[-1] == ("14:00", "21:00")


def test_slots_never_overlap_existing_bookings(service, events):
    service.create_booking(TOMORROW, "12:00", [POWDER])

    result = service.available_slots(TOMORROW, [VIP])
    starts = [slot.start_time for slot in result.slots]

    assert "09:00" in starts
    assert "09:30" not in starts
    assert "11:30" not in starts
    assert "13:30" not in starts
    assert "14:00" in starts
    for slot in result.slots:
        assert slot.end <= 12 * 60 or slot.start >= 14 * 60


def test_slots_stay_within_shop_hours(service):
    result = service.available_slots(TOMORROW, [SPA])

    assert all(slot.start >= service.config.shop_open for slot in result.slots)
    assert all(slot.end <= service.config.shop_close for slot in result.slots)


def test_today_excludes_passed_start_times(service):
    result = service.available_slots(TODAY, [POWDER])

    assert result.slots
    assert result.slots[0].start_time == "12:30"
    now_minutes = NOW.hour * 60 + NOW.minute
    assert all(slot.start >= now_minutes for slot in result.slots)


def test_past_date_is_rejected(service):
    with pytest.raises(DateInPast):
        service.available_slots(TODAY - timedelta(days=1), [POWDER])


def test_legacy_mode_uses_default_duration(service):
    result = service.available_slots(TOMORROW, [])

    assert result.legacy is True
    assert result.total_duration_minutes == 60
    assert _times(result)[0] == ("09:00", "10:00")
    assert _times(result)[-1] == ("20:00", "21:00")
    assert len(result.slots) == 23


def test_available_slots_is_idempotent(service, events):
    service.create_booking(TOMORROW, "15:00", [INTERIOR])

    first = service.available_slots(TOMORROW, [UV])
    second = service.available_slots(TOMORROW, [UV])

    assert first == second


def test_invalid_selection_is_rejected_before_slot_search(service):
    with pytest.raises(IncompatibleCombination):
        service.available_slots(TOMORROW, [VIP, SPA])
    with pytest.raises(UnknownService):
        service.available_slots(TOMORROW, ["Headlight Polish"])


def test_fully_booked_day_returns_empty_list(db, events):
    service = AvailabilityService(
        db,
        config=SchedulingConfig(shop_open=9 * 60, shop_close=13 * 60),
        clock=fixed_clock,
    )
    service.create_booking(TOMORROW, "09:00", [VIP])

    result = service.available_slots(TOMORROW, [POWDER])

    assert result.slots == []


def test_create_booking_persists_block_and_cells(service, db, events):
    booking = service.create_booking(TOMORROW, "10:00", [ENGINE, UV], vehicle="automobile", notes="Black paint")

    assert booking.id is not None
    assert booking.status == "pending"
    assert (booking.start_time, booking.end_time) == ("10:00", "15:30")
    assert booking.duration_minutes == 330
    assert booking.vehicle == "automobile"
    cells = db.query(BookingCells).filter(BookingCells.booking_id == booking.id).all()
    assert len(cells) == 11
    assert events == [("booking_created", {
        "booking_id": booking.id,
        "date": TOMORROW.isoformat(),
        "start_time": "10:00",
        "end_time": "15:30",
    })]


def test_create_booking_accepts_am_pm_time(service, events):
    booking = service.create_booking(TOMORROW, "1:00 PM", [POWDER])

    assert booking.start_time == "13:00"


def test_overlapping_booking_is_refused(service, events):
    service.create_booking(TOMORROW, "10:00", [VIP])

    with pytest.raises(SlotNoLongerAvailable):
        service.create_booking(TOMORROW, "12:30", [POWDER])

    # Back-to-back is fine
    service.create_booking(TOMORROW, "13:00", [POWDER])


def test_store_constraint_catches_stale_recheck(service, db, events, monkeypatch):
    service.create_booking(TOMORROW, "10:00", [VIP])

    # Simulate a concurrent writer committing between re-check and insert
    monkeypatch.setattr(
        "app.services.scheduling.availability.occupied_ranges",
        lambda _db, _date: [],
    )

    with pytest.raises(SlotNoLongerAvailable):
        service.create_booking(TOMORROW, "11:00", [POWDER])

    assert db.query(Bookings).count() == 1


@pytest.mark.parametrize("time_slot", ["19:30", "10:15", "08:30"])
def test_create_booking_outside_grid_or_hours(service, time_slot):
    with pytest.raises(InvalidTimeSlot):
        service.create_booking(TOMORROW, time_slot, [POWDER])


def test_create_booking_malformed_time(service):
    with pytest.raises(MalformedRequest):
        service.create_booking(TOMORROW, "soon", [POWDER])


def test_create_booking_requires_services(service):
    with pytest.raises(MalformedRequest):
        service.create_booking(TOMORROW, "10:00", [])


def test_create_booking_in_the_past(service):
    with pytest.raises(DateInPast):
        service.create_booking(TODAY, "10:00", [POWDER])
    with pytest.raises(DateInPast):
        service.create_booking(TODAY - timedelta(days=2), "10:00", [POWDER])


def test_cancelled_booking_frees_the_slot(service, db, events):
    booking = service.create_booking(TOMORROW, "12:00", [POWDER])

    cancelled = service.cancel_booking(booking.id)

    assert cancelled.status == "cancelled"
    assert db.query(BookingCells).count() == 0
    starts = [slot.start_time for slot in service.available_slots(TOMORROW, [POWDER]).slots]
    assert "12:00" in starts
    service.create_booking(TOMORROW, "12:00", [POWDER])
    assert events[-2] == ("booking_cancelled", {"booking_id": booking.id})


def test_rejected_booking_does_not_block(service, db, events):
    booking = service.create_booking(TOMORROW, "12:00", [POWDER])
    booking.status = "rejected"
    db.commit()

    starts = [slot.start_time for slot in service.available_slots(TOMORROW, [POWDER]).slots]

    assert "12:00" in starts

    rebooked = service.create_booking(TOMORROW, "12:00", [POWDER])

    assert rebooked.status == "pending"
    cells = db.query(BookingCells).all()
    assert {cell.booking_id for cell in cells} == {rebooked.id}
    assert sorted(cell.cell for cell in cells) == ["12:00", "12:30", "13:00", "13:30"]


def test_status_changed_outside_cancel_frees_cells_for_new_booking(service, db, events):
    first = service.create_booking(TOMORROW, "09:00", [UV])
    db.query(Bookings).filter(Bookings.id == first.id).update({"status": "cancelled"})
    db.commit()

    rebooked = service.create_booking(TOMORROW, "10:00", [POWDER])

    assert rebooked.start_time == "10:00"
    assert db.query(BookingCells).filter(BookingCells.booking_id == first.id).count() == 0


def test_unreadable_booking_start_is_logged_as_error(service, db, events, caplog):
    booking = service.create_booking(TOMORROW, "12:00", [POWDER])
    booking.start_time = "noon"
    db.commit()

    with caplog.at_level(logging.ERROR, logger="app.services.scheduling.conflicts"):
        occupied_ranges(db, TOMORROW)

    assert f"Booking {booking.id} has unparsable start_time='noon'" in caplog.text


def test_cancel_rules(service, db, events):
    booking = service.create_booking(TOMORROW, "12:00", [POWDER])
    booking.status = "completed"
    db.commit()

    with pytest.raises(BookingNotCancellable):
        service.cancel_booking(booking.id)
    with pytest.raises(BookingNotFound):
        service.cancel_booking(9999)
