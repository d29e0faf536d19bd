from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiohttp
from fastapi import Depends, FastAPI, Request, Response

from trip_planner.config import get_settings
from trip_planner.logging import setup_logging
from trip_planner.services.places import PlaceLookupClient
from trip_planner.services.trip_store import get_trip_store
from trip_planner.services.trips import TripRequestHandler

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging(settings.log_level)
    async with aiohttp.ClientSession() as session:
        app.state.trip_handler = TripRequestHandler(
            PlaceLookupClient(settings, session=session),
            get_trip_store(),
        )
        yield


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Plans a trip and collects nearby points of interest using Google Places.",
    lifespan=lifespan,
)


def get_trip_handler(request: Request) -> TripRequestHandler:
    return request.app.state.trip_handler


@app.get("/", tags=["Root"])
async def root():
    return {"ok": True, "service": settings.app_name, "version": settings.version}


@app.get("/health", tags=["Healthcheck"])
async def health():
    return {"ok": True}


@app.post("/trips", tags=["Trips"])
@app.post("/trip", include_in_schema=False)
async def create_trip(request: Request, handler: TripRequestHandler = Depends(get_trip_handler)):
    """Body is read raw so malformed JSON gets the same 400 as the serverless entry point."""
    result = await handler.handle(await request.body())
    return Response(content=result.body_json(), status_code=result.status_code, headers=result.headers)
