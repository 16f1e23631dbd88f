"""
Pickup API request/response schemas. Pydantic only in api layer.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field


class BusinessDateResponse(BaseModel):
    venue_id: str | None = None
    timestamp: str
    business_date: date
    span_start: date
    span_end: date


class RouteCreateRequest(BaseModel):
    driver_profile_id: str | None = None
    round_trips: int = Field(default=0, ge=0)
    capacity: int | None = Field(default=None, ge=1)  # None -> capacidad por defecto
    departure_time: str | None = None  # "HH:MM"
    return_departure_time: str | None = None
    avoid_highways: bool = False
    avoid_tolls: bool = False
    passengers: list["PassengerEntrySchema"] | None = None


class RouteUpdateRequest(BaseModel):
    """Solo los campos enviados se aplican; null borra conductor/horarios."""
    driver_profile_id: str | None = None
    round_trips: int | None = Field(default=None, ge=0)
    capacity: int | None = Field(default=None, ge=1)
    departure_time: str | None = None
    return_departure_time: str | None = None
    avoid_highways: bool | None = None
    avoid_tolls: bool | None = None
    passengers: list["PassengerEntrySchema"] | None = None


class PassengerEntrySchema(BaseModel):
    profile_id: str
    trip_number: int = Field(default=1, ge=1)


class AddPassengerRequest(BaseModel):
    profile_id: str
    trip_number: int = 1


class InsertPassengerRequest(BaseModel):
    profile_id: str
    index: int = Field(ge=0)
    from_trip_number: int | None = None


class MoveAttendeeRequest(BaseModel):
    profile_id: str
    to_route_id: str
    to_trip_number: int = 1


class ReorderRequest(BaseModel):
    profile_ids: list[str]


class StepRequest(BaseModel):
    profile_id: str
    direction: Literal["up", "down"]


class SuggestionRequest(BaseModel):
    suggestion: dict
    delete_existing: bool = True


class MutationResponse(BaseModel):
    ok: bool = True
    route_id: str | None = None


class PassengerSchema(BaseModel):
    profile_id: str
    display_name: str | None = None
    pickup_destination: str | None = None
    trip_number: int
    order_index: int


class TripSchema(BaseModel):
    trip_number: int
    departure_time: str | None = None
    over_capacity: bool = False
    passengers: list[PassengerSchema]


class RouteSchema(BaseModel):
    route_id: str
    venue_id: str
    business_date: date
    driver_profile_id: str | None = None
    round_trips: int
    capacity: int
    departure_time: str | None = None
    return_departure_time: str | None = None
    avoid_highways: bool = False
    avoid_tolls: bool = False
    directions_avoid: str | None = None
    capacity_warnings: list[int]
    trips: list[TripSchema]


class AttendeeSchema(BaseModel):
    profile_id: str
    display_name: str
    pickup_destination: str | None = None
    start_time: str | None = None


class StaffProfileSchema(BaseModel):
    profile_id: str
    display_name: str
    role: str


class PickupBoardSchema(BaseModel):
    venue_id: str
    business_date: date
    routes: list[RouteSchema]
    attendees: list[AttendeeSchema]
    unassigned: list[AttendeeSchema]
    staff_profiles: list[StaffProfileSchema]


class ApplySummarySchema(BaseModel):
    created_route_ids: list[str]
    applied: int
    skipped: list[str]


RouteCreateRequest.model_rebuild()
RouteUpdateRequest.model_rebuild()
