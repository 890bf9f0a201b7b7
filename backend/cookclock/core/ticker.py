import asyncio
import logging
import time
from typing import Callable, List, Optional

from ..models.recipe import Recipe
from ..models.session import Session, TickOutcome
from .session_engine import SessionEngine

log = logging.getLogger(__name__)

Listener = Callable[[str, Optional[Session]], None]


class Ticker:
    """
    Samples the wall clock every `interval_sec` and feeds it to the engine.
    Keeps no session state; the recipe is looked up on every tick.
    """

    def __init__(
        self,
        engine: SessionEngine,
        recipe_lookup: Callable[[str], Optional[Recipe]],
        interval_sec: float = 1.0,
        clock: Callable[[], float] = time.time,
    ):
        self.engine = engine
        self.recipe_lookup = recipe_lookup
        self.interval_sec = interval_sec
        self.clock = clock
        self.task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    def add_listener(self, fn: Listener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: Listener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self) -> None:
        if self.running:
            return
        self.task = asyncio.create_task(self._run())
        log.info("Ticker started (every %ss)", self.interval_sec)

    async def stop(self) -> None:
        if self.task is None:
            return
        self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            pass
        self.task = None
        log.info("Ticker stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_sec)
            try:
                self.tick_once()
            except Exception:
                log.exception("Tick failed")

    def tick_once(self) -> TickOutcome:
        recipe_id = self.engine.active_recipe_id
        if recipe_id is None:
            return TickOutcome.NOOP

        recipe = self.recipe_lookup(recipe_id)
        if recipe is None:
            log.warning("Active recipe %s not found, skipping tick", recipe_id)
            return TickOutcome.NOOP

        outcome = self.engine.tick(recipe, self.clock())
        if outcome != TickOutcome.NOOP:
            self.notify(outcome.value)
        return outcome

    def notify(self, event: str) -> None:
        """Push `event` and the current snapshot to every listener."""
        snapshot = self.engine.snapshot()
        for fn in list(self._listeners):
            try:
                fn(event, snapshot)
            except Exception:
                log.exception("Tick listener failed")
