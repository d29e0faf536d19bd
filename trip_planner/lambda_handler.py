"""API gateway proxy entry point (serverless deployment)."""

from __future__ import annotations

import asyncio
import base64
import binascii
from functools import lru_cache
from typing import Any, Dict, Optional, Union

from trip_planner.config import get_settings
from trip_planner.logging import setup_logging
from trip_planner.services.places import PlaceLookupClient
from trip_planner.services.trip_store import get_trip_store
from trip_planner.services.trips import TripRequestHandler

# One loop per process, reused across warm invocations so async clients outlive a single request.
_loop = asyncio.new_event_loop()


@lru_cache
def get_trip_handler() -> TripRequestHandler:
    settings = get_settings()
    setup_logging(settings.log_level)
    return TripRequestHandler(PlaceLookupClient(settings), get_trip_store())


def _event_body(event: Any) -> Optional[Union[str, bytes]]:
    if not isinstance(event, dict):
        return None
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError, TypeError):
            return None
    return body


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    response = _loop.run_until_complete(get_trip_handler().handle(_event_body(event)))
    return response.to_gateway()
