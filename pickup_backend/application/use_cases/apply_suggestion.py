"""
Apply an assistant route suggestion to a ledger. No FastAPI.

Two modes:
- delete_existing=True ("start from scratch"): every route of the date is
  deleted and one route is created per suggested route.
- delete_existing=False: suggested routes are paired with existing routes
  by creation order; each paired route is emptied and refilled.

Names are matched to attendees/staff by display name. Every passenger goes
through move_attendee, so duplicated names never break the one-route rule.
"""

from typing import Optional, Sequence

from pickup_backend.domain.ledger import PickupAssignmentLedger
from pickup_backend.domain.models import (
    DEFAULT_ROUTE_CAPACITY,
    ApplySummary,
    Attendee,
    Profile,
    Route,
    RouteSuggestion,
    SuggestedRoute,
)
from pickup_backend.logging import get_logger

logger = get_logger(__name__)


def _find_driver_id(driver_name: Optional[str], staff_profiles: Sequence[Profile]) -> Optional[str]:
    if not driver_name:
        return None
    staff = next((s for s in staff_profiles if s.display_name == driver_name), None)
    return staff.profile_id if staff else None


def _fill_route(
    ledger: PickupAssignmentLedger,
    route: Route,
    suggested: SuggestedRoute,
    attendees_by_name: dict[str, Attendee],
    summary: ApplySummary,
) -> None:
    for trip in suggested.trips:
        if not route.has_trip(trip.trip_number):
            for p in trip.passengers:
                summary.skipped.append(f"{p.name}: trip {trip.trip_number} not on route {route.route_id}")
            logger.warning(
                "suggestion_trip_skipped",
                route_id=route.route_id,
                trip_number=trip.trip_number,
                trip_count=route.trip_count,
            )
            continue
        for p in trip.passengers:
            attendee = attendees_by_name.get(p.name)
            if attendee is None:
                summary.skipped.append(f"{p.name}: unknown attendee")
                logger.warning("suggestion_attendee_unknown", name=p.name)
                continue
            result = ledger.move_attendee(attendee.profile_id, route.route_id, trip.trip_number)
            if result.ok:
                summary.applied += 1
            else:
                summary.skipped.append(f"{p.name}: {result.message}")


def apply_suggestion(
    ledger: PickupAssignmentLedger,
    suggestion: RouteSuggestion,
    staff_profiles: Sequence[Profile],
    attendees: Sequence[Attendee],
    delete_existing: bool = True,
    default_capacity: int = DEFAULT_ROUTE_CAPACITY,
) -> ApplySummary:
    """
    Flow: (delete all | pair existing) -> per route: create/clear -> move_attendee per passenger.

    Raises:
        ValueError: existing-routes mode with no route to pair with.
    """
    summary = ApplySummary()
    # Primer nombre gana si hay duplicados
    attendees_by_name: dict[str, Attendee] = {}
    for a in attendees:
        attendees_by_name.setdefault(a.display_name, a)

    if delete_existing:
        for route in ledger.routes:
            ledger.delete_route(route.route_id)

        for suggested in suggestion.routes:
            created = ledger.create_route(
                driver_profile_id=_find_driver_id(suggested.driver_name, staff_profiles),
                round_trips=max(0, suggested.round_trips),
                capacity=suggested.capacity if suggested.capacity and suggested.capacity > 0 else default_capacity,
            )
            if not created.ok:
                summary.skipped.append(f"route {suggested.driver_name or '-'}: {created.message}")
                logger.error("suggestion_route_create_failed", reason=created.message)
                continue
            summary.created_route_ids.append(created.route_id)
            route = ledger.get_route(created.route_id)
            _fill_route(ledger, route, suggested, attendees_by_name, summary)
    else:
        existing = ledger.routes
        if not existing:
            raise ValueError("No existing pickup routes to apply the suggestion to")

        for i, suggested in enumerate(suggestion.routes):
            if i >= len(existing):
                summary.skipped.append(f"route {suggested.driver_name or i + 1}: no existing route left")
                logger.warning("suggestion_route_unpaired", index=i, existing_routes=len(existing))
                continue
            route = existing[i]
            ledger.clear_passengers(route.route_id)
            _fill_route(ledger, route, suggested, attendees_by_name, summary)

    logger.info(
        "suggestion_applied",
        venue_id=ledger.venue_id,
        business_date=ledger.business_date.isoformat(),
        delete_existing=delete_existing,
        created_routes=len(summary.created_route_ids),
        applied=summary.applied,
        skipped=len(summary.skipped),
    )
    return summary
