import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect

from ..core.session_engine import SessionConflictError, SessionEngine
from ..core.ticker import Ticker
from ..models.session import Session
from ..models.views import SessionView, StartRequest
from ..services.recipe_catalog import RecipeCatalog, RecipeNotFoundError
from .dependencies import get_catalog, get_engine, get_ticker, session_view

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/session", tags=["session"])


def _active_recipe(engine: SessionEngine, catalog: RecipeCatalog):
    if engine.active_recipe_id is None:
        return None
    return catalog.find(engine.active_recipe_id)


def _set_running(engine: SessionEngine, ticker: Ticker, running: bool) -> str:
    """Pause or resume; only an actual change of `is_running` is reported."""
    before = engine.snapshot()
    after = engine.resume() if running else engine.pause()
    if before is None or after is None or before.is_running == after.is_running:
        return "noop"
    event = "resumed" if running else "paused"
    ticker.notify(event)
    return event


@router.get("", response_model=SessionView)
async def get_session(request: Request):
    return session_view(request)


@router.post("/start", response_model=SessionView)
async def start_session(
    body: StartRequest,
    request: Request,
    engine: SessionEngine = Depends(get_engine),
    catalog: RecipeCatalog = Depends(get_catalog),
    ticker: Ticker = Depends(get_ticker),
):
    try:
        recipe = catalog.get(body.recipe_id)
    except RecipeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        engine.start(recipe)
    except SessionConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    ticker.notify("started")
    return session_view(request, "started")


@router.post("/pause", response_model=SessionView)
async def pause_session(
    request: Request,
    engine: SessionEngine = Depends(get_engine),
    ticker: Ticker = Depends(get_ticker),
):
    return session_view(request, _set_running(engine, ticker, False))


@router.post("/resume", response_model=SessionView)
async def resume_session(
    request: Request,
    engine: SessionEngine = Depends(get_engine),
    ticker: Ticker = Depends(get_ticker),
):
    return session_view(request, _set_running(engine, ticker, True))


@router.post("/stop-step", response_model=SessionView)
async def stop_current_step(
    request: Request,
    engine: SessionEngine = Depends(get_engine),
    catalog: RecipeCatalog = Depends(get_catalog),
    ticker: Ticker = Depends(get_ticker),
):
    recipe = _active_recipe(engine, catalog)
    if recipe is None:
        return session_view(request, "noop")

    outcome = engine.stop_current_step(recipe)
    ticker.notify(outcome.value)
    return session_view(request, outcome.value)


@router.websocket("/ws")
async def session_websocket(ws: WebSocket):
    """
    Streams a SessionView after every engine change. Accepts the text
    commands pause, resume, stop and snapshot from the client.
    """
    await ws.accept()
    log.info("Session websocket connected")

    engine: SessionEngine = ws.app.state.engine
    catalog: RecipeCatalog = ws.app.state.catalog
    ticker: Ticker = ws.app.state.ticker
    queue: "asyncio.Queue[str]" = asyncio.Queue()

    def on_event(event: str, _snapshot: Optional[Session]) -> None:
        queue.put_nowait(event)

    async def pump_views():
        while True:
            event = await queue.get()
            await ws.send_json(session_view(ws, event).model_dump(mode="json"))

    async def handle_commands():
        while True:
            command = (await ws.receive_text()).strip().lower()
            if command == "pause":
                _set_running(engine, ticker, False)
            elif command == "resume":
                _set_running(engine, ticker, True)
            elif command == "stop":
                recipe = _active_recipe(engine, catalog)
                if recipe is not None:
                    ticker.notify(engine.stop_current_step(recipe).value)
            elif command == "snapshot":
                queue.put_nowait("snapshot")
            else:
                log.warning("Unknown websocket command: %r", command)
                await ws.send_json({"type": "error", "message": f"Unknown command: {command}"})

    ticker.add_listener(on_event)
    queue.put_nowait("snapshot")
    tasks = [asyncio.create_task(pump_views()), asyncio.create_task(handle_commands())]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
    except WebSocketDisconnect:
        pass
    finally:
        ticker.remove_listener(on_event)
        for task in tasks:
            task.cancel()
        log.info("Session websocket disconnected")
