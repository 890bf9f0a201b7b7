from contextlib import asynccontextmanager
from typing import Callable, Optional
import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.recipes import router as recipes_router
from .api.session import router as session_router
from .core.config import Settings, get_settings
from .core.session_engine import SessionEngine
from .core.ticker import Ticker
from .services.recipe_catalog import RecipeCatalog

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

log = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[RecipeCatalog] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    settings = settings or get_settings()

    if catalog is None:
        if settings.recipes_file:
            catalog = RecipeCatalog.from_file(settings.recipes_file)
        else:
            catalog = RecipeCatalog()

    engine = SessionEngine(clock=clock)
    ticker = Ticker(engine, catalog.find, interval_sec=settings.tick_interval_sec, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ticker.start()
        try:
            yield
        finally:
            await ticker.stop()

    app = FastAPI(title="cookclock", version="0.1.0", description="Guided, timed recipe sessions",
                  lifespan=lifespan)
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.engine = engine
    app.state.ticker = ticker

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(recipes_router)
    app.include_router(session_router)

    @app.get("/api/health")
    async def health_check():
        return {
            "status": "ok",
            "message": "cookclock API is running",
            "recipes": len(catalog),
            "active_recipe_id": engine.active_recipe_id,
        }

    log.info("cookclock app created with %d recipes", len(catalog))
    return app


app = create_app()
