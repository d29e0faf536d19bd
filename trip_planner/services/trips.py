"""Trip request handling: parse, look up POIs, persist, respond."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Protocol, Sequence, Union

from pydantic import ValidationError

from trip_planner.logging import get_logger
from trip_planner.models import Coordinates, TripRecord, TripRequest
from trip_planner.services.places import POI_CATEGORIES
from trip_planner.services.trip_store import SaveResult, TripRecordStore

logger = get_logger(__name__)

INVALID_JSON = "Invalid JSON format"
MISSING_LOCATION = "Missing current location."
INVALID_REQUEST = "Invalid trip request."
SUCCESS_MESSAGE = "Trip processed successfully."

JSON_HEADERS = {"Content-Type": "application/json"}
SUCCESS_HEADERS = {**JSON_HEADERS, "Access-Control-Allow-Origin": "*"}


class PlaceLookup(Protocol):
    async def fetch_nearby(self, lat: float, lng: float, category: str) -> List[Dict[str, Any]]:
        ...


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=lambda: dict(JSON_HEADERS))

    def body_json(self) -> str:
        return json.dumps(self.body, ensure_ascii=False)

    def to_gateway(self) -> Dict[str, Any]:
        """Shape expected by API gateway proxy integrations."""
        return {"statusCode": self.status_code, "headers": dict(self.headers), "body": self.body_json()}


class TripRequestError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def parse_trip_request(raw_body: Union[str, bytes, None]) -> TripRequest:
    """Decode and validate the request body, raising ``TripRequestError`` on rejection."""
    if raw_body is None:
        raise TripRequestError(INVALID_JSON)
    try:
        payload = json.loads(raw_body)
    except (TypeError, ValueError):
        raise TripRequestError(INVALID_JSON) from None

    if not isinstance(payload, dict):
        raise TripRequestError(MISSING_LOCATION)

    try:
        request = TripRequest.model_validate(payload)
    except ValidationError as exc:
        if any(err["loc"][:1] == ("currentLocation",) for err in exc.errors()):
            raise TripRequestError(MISSING_LOCATION) from None
        raise TripRequestError(INVALID_REQUEST) from None

    if not request.has_location:
        raise TripRequestError(MISSING_LOCATION)
    return request


def summarize(request: TripRequest, poi_count: int) -> str:
    origin = request.origin or "unknown"
    destination = request.destination or "unknown"
    vehicle = request.vehicle or "unknown"
    return (
        f"Successfully planned trip from {origin} to {destination} by {vehicle}. "
        f"Found {poi_count} points of interest near your location."
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TripRequestHandler:
    def __init__(
        self,
        lookup: PlaceLookup,
        store: TripRecordStore,
        *,
        categories: Sequence[str] = POI_CATEGORIES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lookup = lookup
        self._store = store
        self._categories = tuple(categories)
        self._clock = clock

    async def handle(self, raw_body: Union[str, bytes, None]) -> HttpResponse:
        try:
            request = parse_trip_request(raw_body)
        except TripRequestError as exc:
            logger.warning("trip_request_rejected", reason=exc.message)
            return HttpResponse(status_code=400, body={"message": exc.message})

        places = await self._gather_places(request.current_location)

        record = TripRecord.compose(request, places, now=self._clock())
        result = await self._persist(record)
        if not result.ok:
            logger.warning("trip_not_persisted", user_id=request.user_id, error=result.error)

        return HttpResponse(
            status_code=200,
            headers=dict(SUCCESS_HEADERS),
            body={
                "message": SUCCESS_MESSAGE,
                "ai_response": summarize(request, len(places)),
                "pois": places,
            },
        )

    async def _gather_places(self, location: Coordinates) -> List[Dict[str, Any]]:
        # gather keeps category order regardless of completion order
        batches = await asyncio.gather(
            *(self._lookup_category(location, category) for category in self._categories)
        )
        return [place for batch in batches for place in batch]

    async def _lookup_category(self, location: Coordinates, category: str) -> List[Dict[str, Any]]:
        try:
            return list(await self._lookup.fetch_nearby(location.lat, location.lng, category))
        except Exception:
            logger.exception("places_lookup_crashed", category=category)
            return []

    async def _persist(self, record: TripRecord) -> SaveResult:
        try:
            return await self._store.save(record)
        except Exception as exc:
            logger.exception("trip_store_crashed", user_id=record.user_id)
            return SaveResult(ok=False, error=str(exc))
