from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    lat: Optional[float] = Field(None, strict=True, allow_inf_nan=False, description="Latitude")
    lng: Optional[float] = Field(None, strict=True, allow_inf_nan=False, description="Longitude")


class TripRequest(BaseModel):
    """Inbound trip request. Only ``currentLocation`` is required downstream."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    origin: Optional[str] = Field(None, alias="from", description="Free-form origin label")
    destination: Optional[str] = Field(None, alias="to", description="Free-form destination label")
    vehicle: Optional[str] = Field(None, description="Travel mode label, e.g. car")
    user_id: Optional[str] = Field(None, alias="userId")
    current_location: Optional[Coordinates] = Field(None, alias="currentLocation")

    @property
    def has_location(self) -> bool:
        loc = self.current_location
        return loc is not None and loc.lat is not None and loc.lng is not None


class PlaceRecord(BaseModel):
    """Trimmed projection of a provider place, as stored with the trip."""

    name: Optional[str] = None
    location: Optional[Dict[str, Any]] = None
    type: Optional[str] = None
    vicinity: Optional[str] = None

    @classmethod
    def from_provider(cls, raw: Mapping[str, Any]) -> "PlaceRecord":
        # Provider results may omit geometry or types; keep what is there.
        geometry = raw.get("geometry")
        location = geometry.get("location") if isinstance(geometry, Mapping) else None
        types = raw.get("types")
        first_type = types[0] if isinstance(types, list) and types else None
        return cls(
            name=_text(raw.get("name")),
            location=dict(location) if isinstance(location, Mapping) else None,
            type=_text(first_type),
            vicinity=_text(raw.get("vicinity")),
        )


def _text(value: Any) -> Optional[str]:
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    return None


_OPTIONAL_REQUEST_KEYS = ("from", "to", "vehicle", "userId")


class TripRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin: Optional[str] = Field(None, alias="from")
    destination: Optional[str] = Field(None, alias="to")
    vehicle: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    current_location: Coordinates = Field(..., alias="currentLocation")
    timestamp: str
    pois: List[PlaceRecord] = Field(default_factory=list)
    # Picked up by the scheduled notification job; never flipped here.
    active: bool = True

    @classmethod
    def compose(
        cls,
        request: TripRequest,
        places: List[Mapping[str, Any]],
        *,
        now: Optional[datetime] = None,
    ) -> "TripRecord":
        return cls(
            origin=request.origin,
            destination=request.destination,
            vehicle=request.vehicle,
            user_id=request.user_id,
            current_location=request.current_location,
            timestamp=iso_timestamp(now or datetime.now(timezone.utc)),
            pois=[PlaceRecord.from_provider(p) for p in places],
        )

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(by_alias=True)
        for key in _OPTIONAL_REQUEST_KEYS:
            if doc.get(key) is None:
                doc.pop(key, None)
        return doc


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
