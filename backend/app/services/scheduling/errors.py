# backend/app/services/scheduling/errors.py
"""
Scheduler error taxonomy.

Every error carries a stable machine code and the HTTP status the API
layer answers with. Routers translate them into HTTPException.
"""


class SchedulingError(Exception):
    code = "scheduling_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"error": self.code, "message": self.message}


class UnknownService(SchedulingError):
    code = "unknown_service"

    def __init__(self, service_id: str):
        super().__init__(f"Unknown service: {service_id}")
        self.service_id = service_id


class IncompatibleCombination(SchedulingError):
    code = "incompatible_combination"

    def __init__(self, reason: str, pair: tuple[str, str]):
        super().__init__(reason)
        self.pair = pair


class DurationExceedsShopHours(SchedulingError):
    code = "duration_exceeds_shop_hours"


class DateInPast(SchedulingError):
    code = "date_in_past"


class InvalidTimeSlot(SchedulingError):
    code = "invalid_time_slot"


class MalformedRequest(SchedulingError):
    code = "malformed_request"


class SlotNoLongerAvailable(SchedulingError):
    code = "slot_no_longer_available"
    status_code = 409

    def __init__(self, message: str = "Time slot is no longer available. Please pick another slot."):
        super().__init__(message)


class BookingNotFound(SchedulingError):
    code = "booking_not_found"
    status_code = 404

    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class BookingNotCancellable(SchedulingError):
    code = "booking_not_cancellable"
