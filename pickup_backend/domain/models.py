"""
Pickup domain models. Dataclasses only. No FastAPI, no external deps beyond dataclasses/typing.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

DEFAULT_ROUTE_CAPACITY = 3


@dataclass(frozen=True)
class DaySwitchBoundary:
    """Hora local a la que el día del local cambia (por defecto 05:00)."""
    hour: int = 5
    minute: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be between 0 and 59, got {self.minute}")

    def as_tuple(self) -> tuple[int, int]:
        return (self.hour, self.minute)


@dataclass(frozen=True)
class BusinessDateSpan:
    start_calendar_date: date
    end_calendar_date: date


@dataclass(frozen=True)
class AttendanceRecord:
    profile_id: str
    work_date: date
    clock_in: Optional[datetime] = None
    pickup_destination: Optional[str] = None
    scheduled_start_time: Optional[str] = None  # "HH:MM"


@dataclass(frozen=True)
class Attendee:
    profile_id: str
    display_name: str
    pickup_destination: Optional[str] = None
    start_time: Optional[str] = None

    @property
    def is_eligible(self) -> bool:
        # Solo con destino de recogida se puede asignar a una ruta.
        return bool(self.pickup_destination and self.pickup_destination.strip())


@dataclass(frozen=True)
class Profile:
    profile_id: str
    display_name: str
    role: str = "cast"  # cast | staff | admin | partner


@dataclass
class Passenger:
    route_id: str
    profile_id: str
    trip_number: int
    order_index: int


@dataclass
class Route:
    route_id: str
    venue_id: str
    business_date: date
    driver_profile_id: Optional[str] = None
    round_trips: int = 0
    capacity: int = DEFAULT_ROUTE_CAPACITY
    departure_time: Optional[str] = None  # "HH:MM"
    return_departure_time: Optional[str] = None  # "HH:MM"
    avoid_highways: bool = False
    avoid_tolls: bool = False
    passengers: List[Passenger] = field(default_factory=list)

    @property
    def trip_count(self) -> int:
        return self.round_trips + 1

    def has_trip(self, trip_number: int) -> bool:
        return 1 <= trip_number <= self.trip_count


@dataclass(frozen=True)
class RouteRef:
    route_id: str
    driver_profile_id: Optional[str]
    trip_numbers: tuple[int, ...]


@dataclass(frozen=True)
class PassengerEntry:
    """Entrada del formulario de ruta: quién va, en qué viaje."""
    profile_id: str
    trip_number: int = 1


# --- Sugerencia de rutas (respuesta JSON del asistente) ---


@dataclass(frozen=True)
class SuggestedPassenger:
    name: str
    destination: Optional[str] = None


@dataclass(frozen=True)
class SuggestedTrip:
    trip_number: int
    passengers: List[SuggestedPassenger]


@dataclass(frozen=True)
class SuggestedRoute:
    driver_name: Optional[str]
    capacity: Optional[int]
    round_trips: int
    trips: List[SuggestedTrip]


@dataclass(frozen=True)
class RouteSuggestion:
    routes: List[SuggestedRoute]
    explanation: str = ""


@dataclass
class ApplySummary:
    created_route_ids: List[str] = field(default_factory=list)
    applied: int = 0
    skipped: List[str] = field(default_factory=list)  # motivo legible por pasajero/ruta omitido
