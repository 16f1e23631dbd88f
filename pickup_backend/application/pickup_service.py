"""
Pickup application service. Load snapshot -> ledger operation -> save on success. No FastAPI.

Each call owns its snapshot for the duration of one operation; a failed
operation is never saved.
"""

from datetime import date, datetime
from typing import Callable, Optional, Sequence

from pickup_backend.application.config import Settings, get_settings
from pickup_backend.application.use_cases.apply_suggestion import apply_suggestion
from pickup_backend.application.use_cases.pickup_day import PickupBoard, build_pickup_board
from pickup_backend.domain.business_date import business_date_span, current_business_date, resolve
from pickup_backend.domain.errors import Result
from pickup_backend.domain.ledger import Direction, PickupAssignmentLedger
from pickup_backend.domain.models import ApplySummary, PassengerEntry
from pickup_backend.infrastructure.attendance_store import ATTENDANCE_STORE, InMemoryAttendanceStore
from pickup_backend.infrastructure.route_store import ROUTE_STORE, InMemoryRouteStore
from pickup_backend.infrastructure.suggestion_loader import load_suggestion
from pickup_backend.logging import get_logger, ledger_context

logger = get_logger(__name__)


class PickupService:
    def __init__(
        self,
        route_store: InMemoryRouteStore = ROUTE_STORE,
        attendance_store: InMemoryAttendanceStore = ATTENDANCE_STORE,
        settings: Optional[Settings] = None,
    ) -> None:
        self.route_store = route_store
        self.attendance_store = attendance_store
        self.settings = settings or get_settings()

    # --- Business dates ---

    def resolve_business_date(self, venue_id: str, timestamp: datetime) -> date:
        return resolve(
            timestamp,
            self.settings.day_switch_for(venue_id),
            self.settings.default_timezone,
        )

    def target_date(self, venue_id: str, requested: Optional[date] = None) -> date:
        """Requested date, or the venue's current business date."""
        if requested is not None:
            return requested
        return current_business_date(
            self.settings.day_switch_for(venue_id),
            self.settings.default_timezone,
        )

    # --- Reads ---

    def ledger(self, venue_id: str, business_date: date) -> PickupAssignmentLedger:
        return self.route_store.load(venue_id, business_date)

    def pickup_board(self, venue_id: str, business_date: Optional[date] = None) -> PickupBoard:
        business_date = self.target_date(venue_id, business_date)
        boundary = self.settings.day_switch_for(venue_id)
        span = business_date_span(business_date, boundary)
        records = self.attendance_store.records_between(
            venue_id, span.start_calendar_date, span.end_calendar_date
        )
        return build_pickup_board(
            self.route_store.load(venue_id, business_date),
            records,
            self.attendance_store.profiles(venue_id),
            boundary,
            self.settings.default_timezone,
        )

    # --- Mutations ---

    def _run(
        self,
        venue_id: str,
        business_date: date,
        event: str,
        operation: Callable[[PickupAssignmentLedger], Result],
        **log_fields,
    ) -> Result:
        ledger = self.route_store.load(venue_id, business_date)
        result = operation(ledger)
        with ledger_context(venue_id, business_date):
            if result.ok:
                self.route_store.save(ledger)
                logger.info(event, route_id=result.route_id, **log_fields)
            else:
                logger.warning(
                    f"{event}_rejected",
                    error=result.error.value,
                    reason=result.message,
                    conflicting_route_id=result.conflicting_route_id,
                    **log_fields,
                )
        return result

    def create_route(
        self,
        venue_id: str,
        business_date: date,
        passengers: Optional[Sequence[PassengerEntry]] = None,
        **settings,
    ) -> Result:
        """Create a route, optionally with its passenger list (route form save)."""
        if settings.get("capacity") is None:
            settings["capacity"] = self.settings.default_route_capacity

        def operation(ledger: PickupAssignmentLedger) -> Result:
            created = ledger.create_route(**settings)
            if not created.ok or passengers is None:
                return created
            filled = ledger.replace_passengers(created.route_id, passengers)
            return filled if not filled.ok else created

        return self._run(venue_id, business_date, "route_created", operation)

    def update_route(
        self,
        venue_id: str,
        business_date: date,
        route_id: str,
        passengers: Optional[Sequence[PassengerEntry]] = None,
        **changes,
    ) -> Result:
        def operation(ledger: PickupAssignmentLedger) -> Result:
            updated = ledger.update_route(route_id, **changes)
            if not updated.ok or passengers is None:
                return updated
            return ledger.replace_passengers(route_id, passengers)

        return self._run(
            venue_id,
            business_date,
            "route_updated",
            operation,
            fields=sorted(changes),
        )

    def delete_route(self, venue_id: str, business_date: date, route_id: str) -> Result:
        return self._run(
            venue_id, business_date, "route_deleted", lambda ledger: ledger.delete_route(route_id)
        )

    def replace_passengers(
        self,
        venue_id: str,
        business_date: date,
        route_id: str,
        entries: Sequence[PassengerEntry],
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "route_passengers_replaced",
            lambda ledger: ledger.replace_passengers(route_id, entries),
            passengers=len(entries),
        )

    def add_passenger(
        self, venue_id: str, business_date: date, route_id: str, profile_id: str, trip_number: int
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "passenger_added",
            lambda ledger: ledger.add_passenger(route_id, profile_id, trip_number),
            profile_id=profile_id,
            trip_number=trip_number,
        )

    def remove_passenger(
        self, venue_id: str, business_date: date, route_id: str, profile_id: str
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "passenger_removed",
            lambda ledger: ledger.remove_passenger(route_id, profile_id),
            profile_id=profile_id,
        )

    def move_attendee(
        self, venue_id: str, business_date: date, profile_id: str, to_route_id: str, to_trip_number: int
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "attendee_moved",
            lambda ledger: ledger.move_attendee(profile_id, to_route_id, to_trip_number),
            profile_id=profile_id,
            trip_number=to_trip_number,
        )

    def insert_passenger_at(
        self,
        venue_id: str,
        business_date: date,
        route_id: str,
        profile_id: str,
        trip_number: int,
        index: int,
        from_trip_number: Optional[int] = None,
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "passenger_dropped",
            lambda ledger: ledger.insert_passenger_at(
                route_id, profile_id, trip_number, index, from_trip_number=from_trip_number
            ),
            profile_id=profile_id,
            trip_number=trip_number,
            index=index,
        )

    def reorder(
        self, venue_id: str, business_date: date, route_id: str, trip_number: int, new_order: Sequence[str]
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "trip_reordered",
            lambda ledger: ledger.reorder(route_id, trip_number, new_order),
            trip_number=trip_number,
        )

    def move_one_step(
        self,
        venue_id: str,
        business_date: date,
        route_id: str,
        trip_number: int,
        profile_id: str,
        direction: Direction,
    ) -> Result:
        return self._run(
            venue_id,
            business_date,
            "passenger_stepped",
            lambda ledger: ledger.move_one_step(route_id, trip_number, profile_id, direction),
            profile_id=profile_id,
            direction=getattr(direction, "value", direction),
        )

    def apply_suggestion(
        self,
        venue_id: str,
        business_date: date,
        raw_suggestion: dict,
        delete_existing: bool = True,
    ) -> ApplySummary:
        """
        Raises:
            ValueError: malformed suggestion, or no route to pair with in existing-routes mode.
        """
        suggestion = load_suggestion(raw_suggestion)
        board = self.pickup_board(venue_id, business_date)
        with ledger_context(venue_id, board.business_date):
            summary = apply_suggestion(
                board.ledger,
                suggestion,
                board.staff_profiles,
                board.attendees,
                delete_existing=delete_existing,
                default_capacity=self.settings.default_route_capacity,
            )
        self.route_store.save(board.ledger)
        return summary
