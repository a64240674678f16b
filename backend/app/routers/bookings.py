# backend/app/routers/bookings.py
"""
Booking API endpoints consumed by the booking UI.

POST  /bookings/validate-services        - combination verdict + total duration
GET   /bookings/services-catalog         - services, shop hours, rules
GET   /bookings/available-slots/{date}   - duration-aware slots for a day
POST  /bookings/create                   - create booking (authoritative re-check)
GET   /bookings/{id}                     - read booking
PATCH /bookings/cancel/{id}              - cancel booking, frees the slot
"""

import json
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.bookings import (
    AvailableSlotsResponse,
    BookingCreate,
    BookingRead,
    ServiceRead,
    ServicesCatalogResponse,
    ShopHoursRead,
    SlotRead,
    ValidateServicesRequest,
    ValidateServicesResponse,
)
from ..services.scheduling import AvailabilityService
from ..services.scheduling.errors import MalformedRequest, SchedulingError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def _http_error(e: SchedulingError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_detail())


def _parse_services_param(raw: str | None) -> list[str]:
    """Decode the JSON-encoded `services` query parameter."""
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise MalformedRequest("services must be a JSON-encoded array of service ids") from None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedRequest("services must be a JSON-encoded array of service ids")
    return value


@router.post(
    "/validate-services",
    response_model=ValidateServicesResponse,
    response_model_exclude_none=True,
)
def validate_services(
    data: ValidateServicesRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    verdict = service.validate_services(data.services)
    return ValidateServicesResponse(
        valid=verdict.valid,
        total_duration=verdict.total_duration_hours,
        error=verdict.error,
    )


@router.get("/services-catalog", response_model=ServicesCatalogResponse)
def get_services_catalog(
    service: AvailabilityService = Depends(get_availability_service),
):
    return ServicesCatalogResponse(
        services=[
            ServiceRead(
                id=s.id,
                name=s.name,
                duration=s.duration_hours,
                category=s.category.value,
            )
            for s in service.catalog
        ],
        shop_hours=ShopHoursRead(
            open=service.config.shop_open_str,
            close=service.config.shop_close_str,
        ),
        incompatible=[list(pair) for pair in service.rules.pairs()],
        slot_step_minutes=service.config.slot_step_minutes,
    )


@router.get("/available-slots/{target_date}", response_model=AvailableSlotsResponse)
def get_available_slots(
    target_date: date,
    services: str | None = Query(None, description="JSON-encoded array of service ids"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get start times on a day where the whole selection fits."""
    try:
        service_ids = _parse_services_param(services)
        result = service.available_slots(target_date, service_ids)
    except SchedulingError as e:
        raise _http_error(e)

    return AvailableSlotsResponse(
        date=result.date,
        available_slots=[
            SlotRead(
                start_time=slot.start_time,
                end_time=slot.end_time,
                duration=slot.duration_minutes / 60,
            )
            for slot in result.slots
        ],
        total_duration=result.total_duration_minutes / 60,
        legacy_mode=result.legacy,
    )


@router.post("/create", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.create_booking(
            target_date=data.date,
            start_time=data.time_slot,
            service_ids=data.service_ids(),
            vehicle=data.vehicle,
            notes=data.notes,
        )
    except SchedulingError as e:
        logger.info(f"Booking refused: {e.code} ({e.message})")
        raise _http_error(e)


@router.get("/{id}", response_model=BookingRead)
def get_booking(
    id: int,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.get_booking(id)
    except SchedulingError as e:
        raise _http_error(e)


@router.patch("/cancel/{id}", response_model=BookingRead)
def cancel_booking(
    id: int,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.cancel_booking(id)
    except SchedulingError as e:
        raise _http_error(e)
