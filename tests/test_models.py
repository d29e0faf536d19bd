from __future__ import annotations

from datetime import datetime, timedelta, timezone

from trip_planner.models import PlaceRecord, TripRecord, TripRequest, iso_timestamp


def test_place_record_picks_first_type(place):
    record = PlaceRecord.from_provider(place("Inn", "lodging", "point_of_interest", lat=47.7, lng=10.3))

    assert record.model_dump() == {
        "name": "Inn",
        "location": {"lat": 47.7, "lng": 10.3},
        "type": "lodging",
        "vicinity": "Inn street 1",
    }


def test_place_record_tolerates_missing_geometry_and_types():
    record = PlaceRecord.from_provider({"name": "Ghost", "types": [], "geometry": {}})

    assert record.location is None
    assert record.type is None
    assert record.vicinity is None

    record = PlaceRecord.from_provider({"name": "Odd", "geometry": "n/a", "types": "restaurant"})
    assert record.location is None
    assert record.type is None

    record = PlaceRecord.from_provider({"name": {"text": "Nested"}, "types": [7], "vicinity": 12})
    assert record.name is None
    assert record.type == "7"
    assert record.vicinity == "12"


def test_trip_request_reads_wire_names():
    request = TripRequest.model_validate(
        {"from": "A", "to": "B", "vehicle": "bike", "userId": 42, "currentLocation": {"lat": 0, "lng": -3.5}}
    )

    assert request.origin == "A"
    assert request.destination == "B"
    assert request.user_id == "42"
    assert request.has_location is True


def test_trip_request_without_coordinates():
    assert TripRequest.model_validate({}).has_location is False
    assert TripRequest.model_validate({"currentLocation": {"lat": 1.0}}).has_location is False


def test_trip_record_compose_projects_places(place):
    request = TripRequest.model_validate({"vehicle": "car", "currentLocation": {"lat": 1.0, "lng": 2.0}})
    now = datetime(2026, 1, 2, 3, 4, 5, 678900, tzinfo=timezone.utc)

    record = TripRecord.compose(request, [place("Fuel", "gas_station", "store")], now=now)
    doc = record.to_document()

    assert doc == {
        "vehicle": "car",
        "currentLocation": {"lat": 1.0, "lng": 2.0},
        "timestamp": "2026-01-02T03:04:05.678Z",
        "pois": [
            {
                "name": "Fuel",
                "location": {"lat": 1.0, "lng": 2.0},
                "type": "gas_station",
                "vicinity": "Fuel street 1",
            }
        ],
        "active": True,
    }


def test_iso_timestamp_normalizes_to_utc():
    cet = timezone(timedelta(hours=2))

    assert iso_timestamp(datetime(2026, 10, 17, 14, 0, tzinfo=cet)) == "2026-10-17T12:00:00.000Z"
    assert iso_timestamp(datetime(2026, 10, 17, 12, 0)) == "2026-10-17T12:00:00.000Z"
