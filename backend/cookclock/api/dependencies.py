from typing import Optional

from fastapi import Request
from starlette.requests import HTTPConnection

from ..core.session_engine import SessionEngine
from ..core.ticker import Ticker
from ..models.views import SessionView
from ..services.recipe_catalog import RecipeCatalog


def get_engine(request: Request) -> SessionEngine:
    return request.app.state.engine


def get_catalog(request: Request) -> RecipeCatalog:
    return request.app.state.catalog


def get_ticker(request: Request) -> Ticker:
    return request.app.state.ticker


def session_view(conn: HTTPConnection, event: Optional[str] = None) -> SessionView:
    """Build the snapshot view from whatever engine/catalog the app holds."""
    engine: SessionEngine = conn.app.state.engine
    catalog: RecipeCatalog = conn.app.state.catalog

    session = engine.snapshot()
    progress = None
    if session is not None:
        recipe = catalog.find(session.recipe_id)
        if recipe is not None:
            progress = engine.progress(recipe)
    return SessionView(
        event=event,
        active_recipe_id=engine.active_recipe_id,
        session=session,
        progress=progress,
    )
