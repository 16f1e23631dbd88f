from datetime import date

import pytest
from fastapi.testclient import TestClient

from pickup_backend.api.main import app
from pickup_backend.api.router import get_service
from pickup_backend.application.config import Settings
from pickup_backend.application.pickup_service import PickupService
from pickup_backend.domain.ledger import PickupAssignmentLedger
from pickup_backend.infrastructure.attendance_store import InMemoryAttendanceStore
from pickup_backend.infrastructure.route_store import InMemoryRouteStore

BUSINESS_DATE = date(2026, 10, 16)


@pytest.fixture
def ledger():
    return PickupAssignmentLedger("venue-1", BUSINESS_DATE)


@pytest.fixture
def two_routes(ledger):
    """R1 has an outbound and one return leg, R2 only the outbound leg."""
    ledger.create_route(route_id="R1", round_trips=1, capacity=3)
    ledger.create_route(route_id="R2", capacity=2)
    return ledger


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        default_timezone="Asia/Tokyo",
        default_day_switch_time="05:00",
        venue_day_switch_times={"venue-midnight": "00:00"},
    )


@pytest.fixture
def service(settings):
    return PickupService(InMemoryRouteStore(), InMemoryAttendanceStore(), settings)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
