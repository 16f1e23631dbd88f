"""
In-memory route store keyed by (venue_id, business_date).

Stand-in for the relational database: a Route table keyed by id and a
Passenger table keyed by (route_id, profile_id). load() hands out a deep
copy, so a ledger only reaches the store through save().
"""

import copy
from datetime import date
from typing import Dict, List, Tuple

from pickup_backend.domain.ledger import PickupAssignmentLedger
from pickup_backend.domain.models import Route

ScopeKey = Tuple[str, date]


class InMemoryRouteStore:
    def __init__(self) -> None:
        self._routes: Dict[ScopeKey, List[Route]] = {}

    def load(self, venue_id: str, business_date: date) -> PickupAssignmentLedger:
        routes = copy.deepcopy(self._routes.get((venue_id, business_date), []))
        return PickupAssignmentLedger(venue_id, business_date, routes)

    def save(self, ledger: PickupAssignmentLedger) -> None:
        # Last write wins
        self._routes[(ledger.venue_id, ledger.business_date)] = copy.deepcopy(ledger.routes)

    def clear(self) -> None:
        self._routes.clear()


# Un store por proceso; reemplazar por persistencia real en producción.
ROUTE_STORE = InMemoryRouteStore()
