from datetime import date, datetime
from zoneinfo import ZoneInfo

from pickup_backend.domain.models import AttendanceRecord, Profile

JST = ZoneInfo("Asia/Tokyo")
BASE = "/pickup/venue-1/2026-10-16"


def _create_route(client, **body):
    response = client.post(f"{BASE}/routes", json=body)
    assert response.status_code == 201, response.text
    return response.json()["route_id"]


def _board(client):
    response = client.get(BASE)
    assert response.status_code == 200, response.text
    return response.json()


def _leg(board, route_id, trip_number=1):
    route = next(r for r in board["routes"] if r["route_id"] == route_id)
    trip = next(t for t in route["trips"] if t["trip_number"] == trip_number)
    return [p["profile_id"] for p in trip["passengers"]]


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_business_date_resolution(client):
    response = client.get("/business-date", params={"timestamp": "2026-10-16T04:59:59+09:00"})
    body = response.json()
    assert body["business_date"] == "2026-10-15"
    assert body["span_start"] == "2026-10-15"
    assert body["span_end"] == "2026-10-16"

    midnight = client.get(
        "/business-date",
        params={"timestamp": "2026-10-16T04:59:59+09:00", "venue_id": "venue-midnight"},
    )
    assert midnight.json()["business_date"] == "2026-10-16"


def test_business_date_now(client):
    response = client.get("/business-date")
    assert response.status_code == 200
    assert response.json()["timestamp"] == "now"


def test_route_lifecycle_with_conflict_and_move(client):
    r1 = _create_route(client, round_trips=1, departure_time="01:00", avoid_tolls=True)
    r2 = _create_route(client, capacity=1)

    assert client.post(f"{BASE}/routes/{r1}/passengers", json={"profile_id": "X"}).status_code == 200
    assert client.post(f"{BASE}/routes/{r1}/passengers", json={"profile_id": "Y"}).status_code == 200

    conflict = client.post(f"{BASE}/routes/{r2}/passengers", json={"profile_id": "X"})
    assert conflict.status_code == 409
    detail = conflict.json()["detail"]
    assert detail["error"] == "already_assigned_elsewhere"
    assert detail["conflicting_route_id"] == r1

    moved = client.post(f"{BASE}/move", json={"profile_id": "X", "to_route_id": r2, "to_trip_number": 1})
    assert moved.status_code == 200
    board = _board(client)
    assert _leg(board, r1) == ["Y"]
    assert _leg(board, r2) == ["X"]

    route1 = next(r for r in board["routes"] if r["route_id"] == r1)
    assert route1["capacity"] == 3
    assert route1["directions_avoid"] == "tolls"
    assert [t["departure_time"] for t in route1["trips"]] == ["01:00", None]

    assert client.delete(f"{BASE}/routes/{r2}").status_code == 200
    assert client.delete(f"{BASE}/routes/{r2}").status_code == 404
    assert [r["route_id"] for r in _board(client)["routes"]] == [r1]


def test_capacity_warning_is_reported_not_enforced(client):
    route_id = _create_route(client, capacity=1)
    for pid in ("A", "B"):
        assert client.post(f"{BASE}/routes/{route_id}/passengers", json={"profile_id": pid}).status_code == 200
    route = _board(client)["routes"][0]
    assert route["capacity_warnings"] == [1]
    assert route["trips"][0]["over_capacity"] is True


def test_ordering_endpoints(client):
    route_id = _create_route(client, round_trips=1)
    for pid in ("A", "B", "C"):
        client.post(f"{BASE}/routes/{route_id}/passengers", json={"profile_id": pid})

    step = client.post(f"{BASE}/routes/{route_id}/trips/1/step", json={"profile_id": "C", "direction": "up"})
    assert step.status_code == 200
    assert _leg(_board(client), route_id) == ["A", "C", "B"]

    bad = client.put(f"{BASE}/routes/{route_id}/trips/1/order", json={"profile_ids": ["A", "B"]})
    assert bad.status_code == 400
    assert bad.json()["detail"]["error"] == "invalid_permutation"

    ok = client.put(f"{BASE}/routes/{route_id}/trips/1/order", json={"profile_ids": ["B", "A", "C"]})
    assert ok.status_code == 200
    assert _leg(_board(client), route_id) == ["B", "A", "C"]

    dropped = client.post(
        f"{BASE}/routes/{route_id}/trips/2/insert",
        json={"profile_id": "A", "index": 0, "from_trip_number": 1},
    )
    assert dropped.status_code == 200
    board = _board(client)
    assert _leg(board, route_id, 1) == ["B", "C"]
    assert _leg(board, route_id, 2) == ["A"]

    out_of_range = client.post(f"{BASE}/routes/{route_id}/passengers", json={"profile_id": "D", "trip_number": 3})
    assert out_of_range.status_code == 400
    assert out_of_range.json()["detail"]["error"] == "trip_number_out_of_range"

    missing = client.post(f"{BASE}/routes/{route_id}/trips/1/step", json={"profile_id": "Z", "direction": "down"})
    assert missing.status_code == 404


def test_remove_passenger_endpoint(client):
    route_id = _create_route(client)
    client.post(f"{BASE}/routes/{route_id}/passengers", json={"profile_id": "A"})
    assert client.delete(f"{BASE}/routes/{route_id}/passengers/A").status_code == 200
    assert _leg(_board(client), route_id) == []
    assert client.delete(f"{BASE}/routes/nope/passengers/A").status_code == 404


def test_route_form_save_replaces_passengers(client):
    r1 = _create_route(client, passengers=[{"profile_id": "X"}])
    r2 = _create_route(
        client,
        round_trips=1,
        passengers=[{"profile_id": "X", "trip_number": 1}, {"profile_id": "Y", "trip_number": 2}],
    )
    board = _board(client)
    assert _leg(board, r1) == []
    assert _leg(board, r2, 1) == ["X"]
    assert _leg(board, r2, 2) == ["Y"]

    patched = client.patch(f"{BASE}/routes/{r2}", json={"round_trips": 0, "driver_profile_id": "s1"})
    assert patched.status_code == 200
    route = next(r for r in _board(client)["routes"] if r["route_id"] == r2)
    assert route["driver_profile_id"] == "s1"
    assert [t["trip_number"] for t in route["trips"]] == [1]

    rejected = client.patch(f"{BASE}/routes/{r2}", json={"passengers": [{"profile_id": "Y", "trip_number": 2}]})
    assert rejected.status_code == 400
    assert _leg(_board(client), r2) == ["X"]


def test_board_and_suggestion(client, service):
    store = service.attendance_store
    for profile in (Profile("c1", "Aki"), Profile("c2", "Mei"), Profile("s1", "Taro", "staff")):
        store.add_profile("venue-1", profile)
    store.add_record(
        "venue-1",
        AttendanceRecord("c1", date(2026, 10, 16), datetime(2026, 10, 16, 21, 0, tzinfo=JST), "Shibuya"),
    )
    store.add_record(
        "venue-1",
        AttendanceRecord("c2", date(2026, 10, 17), datetime(2026, 10, 17, 1, 0, tzinfo=JST), "Shinjuku"),
    )

    board = _board(client)
    assert [a["profile_id"] for a in board["unassigned"]] == ["c1", "c2"]
    assert [s["profile_id"] for s in board["staff_profiles"]] == ["s1"]

    applied = client.post(
        f"{BASE}/suggestion",
        json={
            "suggestion": {
                "routes": [
                    {
                        "driver_name": "Taro",
                        "capacity": 2,
                        "trips": [{"trip_number": 1, "passengers": [{"name": "Mei"}, {"name": "Aki"}]}],
                    }
                ]
            }
        },
    )
    assert applied.status_code == 200
    body = applied.json()
    assert body["applied"] == 2
    route_id = body["created_route_ids"][0]

    board = _board(client)
    assert board["unassigned"] == []
    assert _leg(board, route_id) == ["c2", "c1"]
    assert board["routes"][0]["driver_profile_id"] == "s1"
    names = [p["display_name"] for p in board["routes"][0]["trips"][0]["passengers"]]
    assert names == ["Mei", "Aki"]


def test_suggestion_existing_mode_without_routes(client):
    response = client.post(f"{BASE}/suggestion", json={"suggestion": {"routes": []}, "delete_existing": False})
    assert response.status_code == 400


def test_suggestion_with_malformed_routes_is_rejected(client):
    route_id = _create_route(client, passengers=[{"profile_id": "X"}])
    for suggestion in ({"routes": ["oops"]}, {"routes": [{"trips": [1]}]}):
        response = client.post(f"{BASE}/suggestion", json={"suggestion": suggestion})
        assert response.status_code == 400
        assert "must be a JSON object" in response.json()["detail"]
    assert _leg(_board(client), route_id) == ["X"]
