"""
Pickup domain results. Ledger operations return a Result; nothing is raised to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    ALREADY_ASSIGNED_ELSEWHERE = "already_assigned_elsewhere"
    INVALID_PERMUTATION = "invalid_permutation"
    ROUTE_NOT_FOUND = "route_not_found"
    PASSENGER_NOT_FOUND = "passenger_not_found"
    TRIP_NUMBER_OUT_OF_RANGE = "trip_number_out_of_range"
    INVALID_ROUTE_SETTINGS = "invalid_route_settings"
    INVALID_DIRECTION = "invalid_direction"


@dataclass(frozen=True)
class Result:
    ok: bool
    error: Optional[ErrorKind] = None
    message: str = ""
    conflicting_route_id: Optional[str] = None
    route_id: Optional[str] = None  # ruta creada/afectada, si aplica

    @classmethod
    def success(cls, route_id: Optional[str] = None) -> "Result":
        return cls(ok=True, route_id=route_id)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        message: str,
        conflicting_route_id: Optional[str] = None,
    ) -> "Result":
        return cls(
            ok=False,
            error=error,
            message=message,
            conflicting_route_id=conflicting_route_id,
        )

    def __bool__(self) -> bool:
        return self.ok
