"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling
- wiring together the store + client + session + templates
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, Depends, Form, Query
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .settings import settings
from .db import Base, engine, SessionLocal
from . import models  # noqa: F401  (registers kv_entries before create_all)
from .geolocation import SubmittedPosition
from .kv_store import SqlKeyValueStore
from .recent_searches import RecentSearchStore
from .schemas import GeolocationFailure, GeolocationIn, StateOut
from .session import WeatherSession
from .weather_clients import OpenWeatherClient

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

# Create tables automatically (single small key/value table).
Base.metadata.create_all(bind=engine)

# Client, store and session (constructed once; one widget per process).
owm = OpenWeatherClient(
    settings.openweather_api_key,
    timeout_s=settings.request_timeout_s,
    base=settings.openweather_base_url,
)
recent_store = RecentSearchStore(SqlKeyValueStore(SessionLocal), key=settings.recent_searches_key)
weather_session = WeatherSession(owm, recent_store, unit=settings.default_units)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load history and run the initial lookup, as the widget does when it first mounts."""
    state = await weather_session.start(settings.default_city)
    logger.info("Startup lookup for %r finished: %s", settings.default_city, state.status.value)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Static and template directories for the page.
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=BASE_DIR / "templates")


def get_session() -> WeatherSession:
    """FastAPI dependency; tests override it with a session wired to fakes."""
    return weather_session


def state_out(session: WeatherSession) -> StateOut:
    return StateOut(state=session.state, recent_searches=session.recent_searches)


def render(request: Request, session: WeatherSession) -> HTMLResponse:
    state = session.state
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": settings.app_name,
            "state": state,
            "unit": state.unit,
            "recent_searches": session.recent_searches,
            "last_city": state.snapshot.location if state.snapshot else "",
        },
    )


# -------------------------
# UI routes
# -------------------------

@app.get("/", response_class=HTMLResponse)
async def home(request: Request, session: WeatherSession = Depends(get_session)):
    """The widget: search bar, unit toggle, recent chips and the current view state."""
    return render(request, session)


@app.post("/search", response_class=HTMLResponse)
async def search(request: Request, city: str = Form(""), session: WeatherSession = Depends(get_session)):
    """City search from the text field, Enter key or a recent-search chip."""
    await session.search_city(city)
    return render(request, session)


@app.post("/geolocate", response_class=HTMLResponse)
async def geolocate(
    request: Request,
    lat: Optional[float] = Form(None, ge=-90.0, le=90.0),
    lon: Optional[float] = Form(None, ge=-180.0, le=180.0),
    error: Optional[GeolocationFailure] = Form(None),
    session: WeatherSession = Depends(get_session),
):
    """Outcome of navigator.geolocation posted by the page."""
    await session.use_current_location(SubmittedPosition(lat, lon, error))
    return render(request, session)


@app.post("/units/toggle", response_class=HTMLResponse)
async def toggle_units(request: Request, session: WeatherSession = Depends(get_session)):
    await session.toggle_unit()
    return render(request, session)


# -------------------------
# JSON APIs
# -------------------------

@app.get("/api/state", response_model=StateOut)
async def api_state(session: WeatherSession = Depends(get_session)):
    return state_out(session)


@app.post("/api/search", response_model=StateOut)
async def api_search(
    q: str = Query(..., min_length=1, max_length=255),
    session: WeatherSession = Depends(get_session),
):
    await session.search_city(q)
    return state_out(session)


@app.post("/api/geolocate", response_model=StateOut)
async def api_geolocate(payload: GeolocationIn, session: WeatherSession = Depends(get_session)):
    await session.use_current_location(SubmittedPosition(payload.lat, payload.lon, payload.error))
    return state_out(session)


@app.post("/api/units/toggle", response_model=StateOut)
async def api_toggle_units(session: WeatherSession = Depends(get_session)):
    await session.toggle_unit()
    return state_out(session)


@app.get("/api/recent")
async def api_recent(session: WeatherSession = Depends(get_session)):
    return {"recent_searches": list(session.recent_searches)}
