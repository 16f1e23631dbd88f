"""
Suggestion loader. Raw JSON dict (assistant response) -> domain RouteSuggestion.
"""

from typing import Any, List, Optional

from pickup_backend.domain.models import (
    RouteSuggestion,
    SuggestedPassenger,
    SuggestedRoute,
    SuggestedTrip,
)


def _to_int(value: Any, default: Optional[int]) -> Optional[int]:
    """int() tolerante: None, vacío o inválido -> default."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _objects(value: Any, where: str) -> List[dict]:
    """Lista de objetos JSON; None -> []. Cualquier otra forma -> ValueError."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where} must be a JSON array")
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ValueError(f"{where}[{i}] must be a JSON object")
    return value


def load_suggestion(raw: dict) -> RouteSuggestion:
    """
    Transform the assistant's JSON into a RouteSuggestion. Missing lists become empty.

    Raises:
        ValueError: the suggestion, a route or a trip is not a JSON object.
            Passenger entries that are not objects are dropped.
    """
    if not isinstance(raw, dict):
        raise ValueError("suggestion must be a JSON object")

    routes: list[SuggestedRoute] = []
    for r, raw_route in enumerate(_objects(raw.get("routes"), "routes")):
        trips: list[SuggestedTrip] = []
        for raw_trip in _objects(raw_route.get("trips"), f"routes[{r}].trips"):
            passengers = [
                SuggestedPassenger(
                    name=str(p.get("name", "")).strip(),
                    destination=p.get("destination"),
                )
                for p in _as_list(raw_trip.get("passengers"))
                if isinstance(p, dict)
            ]
            trips.append(
                SuggestedTrip(
                    trip_number=_to_int(raw_trip.get("trip_number"), 1),
                    passengers=passengers,
                )
            )
        driver_name = raw_route.get("driver_name")
        routes.append(
            SuggestedRoute(
                driver_name=str(driver_name).strip() if driver_name else None,
                capacity=_to_int(raw_route.get("capacity"), None),
                round_trips=_to_int(raw_route.get("round_trips"), 0) or 0,
                trips=trips,
            )
        )
    return RouteSuggestion(routes=routes, explanation=str(raw.get("explanation") or ""))
