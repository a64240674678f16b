# backend/app/schemas/bookings.py

import json
from datetime import date
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Booking UI speaks camelCase
API_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ValidateServicesRequest(BaseModel):
    services: list[str]

    model_config = API_CONFIG


class ValidateServicesResponse(BaseModel):
    valid: bool
    total_duration: Optional[float] = Field(None, description="Total duration in hours")
    error: Optional[str] = None

    model_config = API_CONFIG


class ServiceRead(BaseModel):
    id: str
    name: str
    duration: float = Field(description="Duration in hours")
    category: str

    model_config = API_CONFIG


class ShopHoursRead(BaseModel):
    open: str
    close: str

    model_config = API_CONFIG


class ServicesCatalogResponse(BaseModel):
    services: list[ServiceRead]
    shop_hours: ShopHoursRead
    incompatible: list[list[str]]
    slot_step_minutes: int

    model_config = API_CONFIG


class SlotRead(BaseModel):
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    duration: float = Field(description="Duration in hours")

    model_config = API_CONFIG


class AvailableSlotsResponse(BaseModel):
    date: date
    available_slots: list[SlotRead]
    total_duration: float = Field(description="Block length in hours")
    legacy_mode: bool = False

    model_config = API_CONFIG


class BookingCreate(BaseModel):
    services: list[str] = []
    # Single-service field sent by older clients
    service: Optional[str] = None

    date: date
    time_slot: str = Field(validation_alias=AliasChoices("timeSlot", "time", "time_slot"))

    vehicle: Literal["motorcycle", "automobile"] = "motorcycle"
    notes: Optional[str] = Field(None, max_length=500)

    model_config = API_CONFIG

    def service_ids(self) -> list[str]:
        ids = list(self.services)
        if self.service and self.service not in ids:
            ids.append(self.service)
        return ids


class BookingRead(BaseModel):
    id: int

    date: date
    start_time: str
    end_time: str
    duration_minutes: int

    services: list[str]
    vehicle: str
    status: str
    notes: Optional[str] = None

    created_at: str
    updated_at: str

    model_config = API_CONFIG

    @field_validator("services", mode="before")
    @classmethod
    def decode_services(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v else []
        return v
