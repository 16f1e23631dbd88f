"""
Pickup API router. Calls application only. No business logic.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException

from pickup_backend.api.schemas import (
    AddPassengerRequest,
    ApplySummarySchema,
    AttendeeSchema,
    BusinessDateResponse,
    InsertPassengerRequest,
    MoveAttendeeRequest,
    MutationResponse,
    PassengerSchema,
    PickupBoardSchema,
    ReorderRequest,
    RouteCreateRequest,
    RouteSchema,
    RouteUpdateRequest,
    StaffProfileSchema,
    StepRequest,
    SuggestionRequest,
    TripSchema,
)
from pickup_backend.application.pickup_service import PickupService
from pickup_backend.application.use_cases.pickup_day import PickupBoard
from pickup_backend.domain.business_date import business_date_span
from pickup_backend.domain.errors import ErrorKind, Result
from pickup_backend.domain.ledger import Direction
from pickup_backend.domain.models import Attendee, PassengerEntry, Route
from pickup_backend.domain.trips import directions_avoid, trip_departure_time

router = APIRouter()

_service: PickupService | None = None

_STATUS_BY_ERROR = {
    ErrorKind.ROUTE_NOT_FOUND: 404,
    ErrorKind.PASSENGER_NOT_FOUND: 404,
    ErrorKind.ALREADY_ASSIGNED_ELSEWHERE: 409,
}


def get_service() -> PickupService:
    global _service
    if _service is None:
        _service = PickupService()
    return _service


def _raise_for(result: Result) -> MutationResponse:
    if result.ok:
        return MutationResponse(ok=True, route_id=result.route_id)
    raise HTTPException(
        status_code=_STATUS_BY_ERROR.get(result.error, 400),
        detail={
            "error": result.error.value,
            "message": result.message,
            "conflicting_route_id": result.conflicting_route_id,
        },
    )


def _route_schema(board: PickupBoard, route: Route) -> RouteSchema:
    ledger = board.ledger
    attendees: dict[str, Attendee] = {a.profile_id: a for a in board.attendees}
    warnings = ledger.capacity_warnings(route.route_id)
    trips = []
    for trip_number, leg in ledger.legs(route.route_id).items():
        trips.append(
            TripSchema(
                trip_number=trip_number,
                departure_time=trip_departure_time(route, trip_number),
                over_capacity=trip_number in warnings,
                passengers=[
                    PassengerSchema(
                        profile_id=p.profile_id,
                        display_name=attendees[p.profile_id].display_name if p.profile_id in attendees else None,
                        pickup_destination=(
                            attendees[p.profile_id].pickup_destination if p.profile_id in attendees else None
                        ),
                        trip_number=p.trip_number,
                        order_index=p.order_index,
                    )
                    for p in leg
                ],
            )
        )
    return RouteSchema(
        route_id=route.route_id,
        venue_id=route.venue_id,
        business_date=route.business_date,
        driver_profile_id=route.driver_profile_id,
        round_trips=route.round_trips,
        capacity=route.capacity,
        departure_time=route.departure_time,
        return_departure_time=route.return_departure_time,
        avoid_highways=route.avoid_highways,
        avoid_tolls=route.avoid_tolls,
        directions_avoid=directions_avoid(route),
        capacity_warnings=warnings,
        trips=trips,
    )


def _attendee_schema(a: Attendee) -> AttendeeSchema:
    return AttendeeSchema(
        profile_id=a.profile_id,
        display_name=a.display_name,
        pickup_destination=a.pickup_destination,
        start_time=a.start_time,
    )


def _entries(passengers) -> list[PassengerEntry] | None:
    if passengers is None:
        return None
    return [PassengerEntry(profile_id=p.profile_id, trip_number=p.trip_number) for p in passengers]


@router.get("/business-date", response_model=BusinessDateResponse)
def get_business_date(
    timestamp: datetime | None = None,
    venue_id: str | None = None,
    service: PickupService = Depends(get_service),
) -> BusinessDateResponse:
    """
    GET /business-date?timestamp=2026-10-16T02:30:00+09:00&venue_id=...
    Sin timestamp: fecha de negocio actual del local.
    """
    boundary = service.settings.day_switch_for(venue_id)
    if timestamp is None:
        business_date = service.target_date(venue_id or "")
        shown = "now"
    else:
        business_date = service.resolve_business_date(venue_id or "", timestamp)
        shown = timestamp.isoformat()
    span = business_date_span(business_date, boundary)
    return BusinessDateResponse(
        venue_id=venue_id,
        timestamp=shown,
        business_date=business_date,
        span_start=span.start_calendar_date,
        span_end=span.end_calendar_date,
    )


@router.get("/pickup/{venue_id}", response_model=PickupBoardSchema)
def get_today_board(venue_id: str, service: PickupService = Depends(get_service)) -> PickupBoardSchema:
    """GET /pickup/{venue_id}: board of the venue's current business date."""
    return _board_schema(venue_id, service.pickup_board(venue_id))


@router.get("/pickup/{venue_id}/{business_date}", response_model=PickupBoardSchema)
def get_board(
    venue_id: str,
    business_date: date,
    service: PickupService = Depends(get_service),
) -> PickupBoardSchema:
    return _board_schema(venue_id, service.pickup_board(venue_id, business_date))


def _board_schema(venue_id: str, board: PickupBoard) -> PickupBoardSchema:
    return PickupBoardSchema(
        venue_id=venue_id,
        business_date=board.business_date,
        routes=[_route_schema(board, r) for r in board.ledger.routes],
        attendees=[_attendee_schema(a) for a in board.attendees],
        unassigned=[_attendee_schema(a) for a in board.unassigned],
        staff_profiles=[
            StaffProfileSchema(profile_id=p.profile_id, display_name=p.display_name, role=p.role)
            for p in board.staff_profiles
        ],
    )


@router.post("/pickup/{venue_id}/{business_date}/routes", response_model=MutationResponse, status_code=201)
def post_route(
    venue_id: str,
    business_date: date,
    request: RouteCreateRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    settings = request.model_dump(exclude={"passengers"})
    return _raise_for(
        service.create_route(venue_id, business_date, passengers=_entries(request.passengers), **settings)
    )


@router.patch("/pickup/{venue_id}/{business_date}/routes/{route_id}", response_model=MutationResponse)
def patch_route(
    venue_id: str,
    business_date: date,
    route_id: str,
    request: RouteUpdateRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    changes = request.model_dump(exclude_unset=True, exclude={"passengers"})
    return _raise_for(
        service.update_route(
            venue_id, business_date, route_id, passengers=_entries(request.passengers), **changes
        )
    )


@router.delete("/pickup/{venue_id}/{business_date}/routes/{route_id}", response_model=MutationResponse)
def delete_route(
    venue_id: str,
    business_date: date,
    route_id: str,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    return _raise_for(service.delete_route(venue_id, business_date, route_id))


@router.post(
    "/pickup/{venue_id}/{business_date}/routes/{route_id}/passengers",
    response_model=MutationResponse,
)
def post_passenger(
    venue_id: str,
    business_date: date,
    route_id: str,
    request: AddPassengerRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    """
    409 con conflicting_route_id si la persona ya está en otra ruta;
    el cliente confirma y llama a /move.
    """
    return _raise_for(
        service.add_passenger(venue_id, business_date, route_id, request.profile_id, request.trip_number)
    )


@router.delete(
    "/pickup/{venue_id}/{business_date}/routes/{route_id}/passengers/{profile_id}",
    response_model=MutationResponse,
)
def delete_passenger(
    venue_id: str,
    business_date: date,
    route_id: str,
    profile_id: str,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    return _raise_for(service.remove_passenger(venue_id, business_date, route_id, profile_id))


@router.post("/pickup/{venue_id}/{business_date}/move", response_model=MutationResponse)
def post_move(
    venue_id: str,
    business_date: date,
    request: MoveAttendeeRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    return _raise_for(
        service.move_attendee(
            venue_id, business_date, request.profile_id, request.to_route_id, request.to_trip_number
        )
    )


@router.post(
    "/pickup/{venue_id}/{business_date}/routes/{route_id}/trips/{trip_number}/insert",
    response_model=MutationResponse,
)
def post_insert(
    venue_id: str,
    business_date: date,
    route_id: str,
    trip_number: int,
    request: InsertPassengerRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    """Drag-and-drop onto a position of a leg."""
    return _raise_for(
        service.insert_passenger_at(
            venue_id,
            business_date,
            route_id,
            request.profile_id,
            trip_number,
            request.index,
            from_trip_number=request.from_trip_number,
        )
    )


@router.put(
    "/pickup/{venue_id}/{business_date}/routes/{route_id}/trips/{trip_number}/order",
    response_model=MutationResponse,
)
def put_order(
    venue_id: str,
    business_date: date,
    route_id: str,
    trip_number: int,
    request: ReorderRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    return _raise_for(service.reorder(venue_id, business_date, route_id, trip_number, request.profile_ids))


@router.post(
    "/pickup/{venue_id}/{business_date}/routes/{route_id}/trips/{trip_number}/step",
    response_model=MutationResponse,
)
def post_step(
    venue_id: str,
    business_date: date,
    route_id: str,
    trip_number: int,
    request: StepRequest,
    service: PickupService = Depends(get_service),
) -> MutationResponse:
    return _raise_for(
        service.move_one_step(
            venue_id, business_date, route_id, trip_number, request.profile_id, Direction(request.direction)
        )
    )


@router.post("/pickup/{venue_id}/{business_date}/suggestion", response_model=ApplySummarySchema)
def post_suggestion(
    venue_id: str,
    business_date: date,
    request: SuggestionRequest,
    service: PickupService = Depends(get_service),
) -> ApplySummarySchema:
    try:
        summary = service.apply_suggestion(
            venue_id, business_date, request.suggestion, delete_existing=request.delete_existing
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ApplySummarySchema(
        created_route_ids=summary.created_route_ids,
        applied=summary.applied,
        skipped=summary.skipped,
    )
