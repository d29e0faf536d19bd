from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from trip_planner.services.trip_store import StoreState, TripRecordStore
from trip_planner.services.trips import TripRequestHandler

FIXED_NOW = datetime(2026, 10, 17, 12, 30, 0, 250000, tzinfo=timezone.utc)


def provider_place(name: str, *types: str, lat: float = 1.0, lng: float = 2.0) -> Dict[str, Any]:
    return {
        "name": name,
        "geometry": {"location": {"lat": lat, "lng": lng}},
        "types": list(types),
        "vicinity": f"{name} street 1",
        "place_id": f"id-{name}",
    }


class StubLookup:
    def __init__(self) -> None:
        self.places: Dict[str, List[Dict[str, Any]]] = {}
        self.failing: set[str] = set()
        self.calls: List[tuple[float, float, str]] = []

    async def fetch_nearby(self, lat: float, lng: float, category: str) -> List[Dict[str, Any]]:
        self.calls.append((lat, lng, category))
        if category in self.failing:
            raise RuntimeError(f"lookup for {category} blew up")
        return list(self.places.get(category, []))


class DummyCollection:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.error = error

    async def add(self, document: Dict[str, Any]) -> tuple[None, None]:
        if self.error is not None:
            raise self.error
        self.documents.append(document)
        return None, None


@pytest.fixture()
def lookup() -> StubLookup:
    return StubLookup()


@pytest.fixture()
def collection() -> DummyCollection:
    return DummyCollection()


@pytest.fixture()
def make_handler(lookup: StubLookup):
    def _make(store: TripRecordStore) -> TripRequestHandler:
        return TripRequestHandler(lookup, store, clock=lambda: FIXED_NOW)

    return _make


@pytest.fixture()
def trip_handler(make_handler, collection: DummyCollection) -> TripRequestHandler:
    return make_handler(TripRecordStore(StoreState(collection=collection)))


@pytest.fixture()
def failing_collection() -> DummyCollection:
    return DummyCollection(error=RuntimeError("quota exceeded"))


@pytest.fixture()
def place():
    return provider_place
