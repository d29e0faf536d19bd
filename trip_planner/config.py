from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App configuration (env-friendly).

    Tip: create a .env file and put GOOGLE_PLACES_API_KEY and
    FIREBASE_SERVICE_ACCOUNT_JSON there for local runs.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Trip POI Planner API"
    version: str = "0.1.0"

    google_places_api_key: Optional[str] = None
    places_base_url: AnyHttpUrl = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"

    http_timeout_s: float = 20.0

    # Service account JSON as a single string (as stored in the function's environment).
    firebase_service_account_json: Optional[str] = None
    trips_collection: str = "trips"

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
