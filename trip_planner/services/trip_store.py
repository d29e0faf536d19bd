"""Best-effort persistence of trip records into Firestore."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore_async

from trip_planner.config import Settings, get_settings
from trip_planner.logging import get_logger
from trip_planner.models import TripRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class StoreState:
    """Connection state fixed at startup: a live collection or the reason there is none."""

    collection: Any = None
    disabled_reason: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.collection is not None and self.disabled_reason is None


class TripRecordStore:
    def __init__(self, state: StoreState) -> None:
        self._state = state

    @classmethod
    def disabled(cls, reason: str) -> "TripRecordStore":
        return cls(StoreState(disabled_reason=reason))

    @property
    def state(self) -> StoreState:
        return self._state

    async def save(self, record: TripRecord) -> SaveResult:
        """Append ``record`` to the trips collection. Never raises."""
        if not self._state.enabled:
            logger.error("trip_store_not_initialized", reason=self._state.disabled_reason)
            return SaveResult(ok=False, error="store not initialized")

        try:
            await self._state.collection.add(record.to_document())
        except Exception as exc:
            logger.exception("trip_save_failed", user_id=record.user_id)
            return SaveResult(ok=False, error=str(exc))

        logger.info("trip_saved", user_id=record.user_id)
        return SaveResult(ok=True)


def _firebase_app(service_account: dict[str, Any]) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        return firebase_admin.initialize_app(credentials.Certificate(service_account))


def connect_trip_store(settings: Settings) -> TripRecordStore:
    """Build the store from the service account payload; disabled on any failure."""
    payload = settings.firebase_service_account_json
    if not payload:
        logger.error("trip_store_init_failed", reason="FIREBASE_SERVICE_ACCOUNT_JSON is not set")
        return TripRecordStore.disabled("FIREBASE_SERVICE_ACCOUNT_JSON is not set")

    try:
        service_account = json.loads(payload)
        if not isinstance(service_account, dict):
            raise ValueError("service account payload must be a JSON object")
        client = firestore_async.client(_firebase_app(service_account))
        collection = client.collection(settings.trips_collection)
    except Exception as exc:
        logger.exception("trip_store_init_failed")
        return TripRecordStore.disabled(f"initialization failed: {exc}")

    return TripRecordStore(StoreState(collection=collection))


@lru_cache
def get_trip_store() -> TripRecordStore:
    """Process-wide store, connected on first use and never re-initialized."""
    return connect_trip_store(get_settings())
