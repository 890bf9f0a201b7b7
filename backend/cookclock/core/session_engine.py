"""
Session timer engine.

The transition functions below are pure: they take the current Session, the
Recipe it runs against and a wall-clock timestamp, and return the next
Session (or None once the recipe is done). SessionEngine owns the single
active-session slot and only ever swaps whole values into it.
"""

import logging
import math
import time
from typing import Callable, Optional, Tuple

from ..models.recipe import Recipe
from ..models.session import Session, SessionProgress, TickOutcome, compute_progress

log = logging.getLogger(__name__)

Transition = Tuple[Optional[Session], TickOutcome]


class SessionConflictError(Exception):
    """Raised by start() while another session is still active."""

    def __init__(self, active_recipe_id: str, requested_recipe_id: str):
        self.active_recipe_id = active_recipe_id
        self.requested_recipe_id = requested_recipe_id
        if active_recipe_id == requested_recipe_id:
            msg = f"Recipe {active_recipe_id} is already being cooked"
        else:
            msg = f"Another session is active (recipe {active_recipe_id})"
        super().__init__(msg)


def new_session(recipe: Recipe, now: float) -> Session:
    return Session(
        recipe_id=recipe.id,
        current_step_index=0,
        is_running=True,
        step_remaining_sec=recipe.step_duration_sec(0),
        overall_remaining_sec=recipe.total_duration_sec,
        last_sample_ts=now,
    )


def _next_step(recipe: Recipe, index: int) -> Optional[Tuple[int, int, int]]:
    """
    Boundary branch shared by tick and stop: the step at `index` has no time
    left. Returns (index, step_remaining, overall_remaining) for the following
    step, or None if `index` was the last step.
    """
    if index >= recipe.step_count - 1:
        return None
    index += 1
    step_remaining = recipe.step_duration_sec(index)
    return index, step_remaining, step_remaining + recipe.remaining_after(index)


def apply_elapsed(session: Session, recipe: Recipe, now: float) -> Transition:
    last = session.last_sample_ts if session.last_sample_ts is not None else now
    elapsed = max(0, math.floor(now - last))
    if elapsed == 0:
        # callbacks closer than a second apart
        return session.model_copy(update={"last_sample_ts": now}), TickOutcome.NOOP

    index = session.current_step_index
    step_remaining = max(0, session.step_remaining_sec)
    overall = max(0, session.overall_remaining_sec)
    outcome = TickOutcome.TICKED

    while elapsed > 0 and index < recipe.step_count:
        dec = min(elapsed, step_remaining)
        step_remaining -= dec
        overall = max(0, overall - dec)
        elapsed -= dec

        if step_remaining <= 0:
            nxt = _next_step(recipe, index)
            if nxt is None:
                return None, TickOutcome.FINISHED
            index, step_remaining, overall = nxt
            outcome = TickOutcome.STEP_ADVANCED

    return session.model_copy(update={
        "current_step_index": index,
        "step_remaining_sec": step_remaining,
        "overall_remaining_sec": overall,
        "last_sample_ts": now,
    }), outcome


def finish_current_step(session: Session, recipe: Recipe, now: float) -> Transition:
    nxt = _next_step(recipe, session.current_step_index)
    if nxt is None:
        return None, TickOutcome.FINISHED
    index, step_remaining, overall = nxt
    # a skip always resumes motion, even from pause
    return session.model_copy(update={
        "current_step_index": index,
        "step_remaining_sec": step_remaining,
        "overall_remaining_sec": overall,
        "is_running": True,
        "last_sample_ts": now,
    }), TickOutcome.STEP_ADVANCED


class SessionEngine:
    """
    Holds at most one cooking session. Not thread-safe; every command is
    expected to run on the same control sequence (the event loop).
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._session: Optional[Session] = None

    @property
    def active_recipe_id(self) -> Optional[str]:
        return self._session.recipe_id if self._session else None

    def snapshot(self) -> Optional[Session]:
        return self._session

    def progress(self, recipe: Recipe) -> Optional[SessionProgress]:
        if self._session is None or self._session.recipe_id != recipe.id:
            return None
        return compute_progress(self._session, recipe)

    # ----- Commands -----
    def start(self, recipe: Recipe, now: Optional[float] = None) -> Session:
        if self._session is not None:
            log.info("Rejecting start of %s: session for %s is active", recipe.id, self._session.recipe_id)
            raise SessionConflictError(self._session.recipe_id, recipe.id)

        self._session = new_session(recipe, self._now(now))
        log.info("Session started for recipe %s (%d steps, %ds)",
                 recipe.id, recipe.step_count, recipe.total_duration_sec)
        return self._session

    def pause(self) -> Optional[Session]:
        if self._session is None:
            log.debug("pause ignored, no active session")
            return None
        self._session = self._session.model_copy(update={"is_running": False, "last_sample_ts": None})
        log.info("Session for %s paused at step %d", self._session.recipe_id, self._session.current_step_index)
        return self._session

    def resume(self, now: Optional[float] = None) -> Optional[Session]:
        if self._session is None:
            log.debug("resume ignored, no active session")
            return None
        self._session = self._session.model_copy(update={"is_running": True, "last_sample_ts": self._now(now)})
        log.info("Session for %s resumed", self._session.recipe_id)
        return self._session

    def tick(self, recipe: Recipe, now: Optional[float] = None) -> TickOutcome:
        sess = self._session
        if sess is None or not sess.is_running:
            return TickOutcome.NOOP
        if not self._matches(recipe, "tick"):
            return TickOutcome.NOOP

        self._session, outcome = apply_elapsed(sess, recipe, self._now(now))
        self._log_outcome(sess.recipe_id, outcome)
        return outcome

    def stop_current_step(self, recipe: Recipe, now: Optional[float] = None) -> TickOutcome:
        sess = self._session
        if sess is None:
            log.debug("stop ignored, no active session")
            return TickOutcome.NOOP
        if not self._matches(recipe, "stop"):
            return TickOutcome.NOOP

        self._session, outcome = finish_current_step(sess, recipe, self._now(now))
        log.info("Step %d of %s stopped", sess.current_step_index, sess.recipe_id)
        self._log_outcome(sess.recipe_id, outcome)
        return outcome

    # ----- Internals -----
    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def _matches(self, recipe: Recipe, command: str) -> bool:
        if recipe.id != self._session.recipe_id:
            log.warning("%s for recipe %s ignored, active session is %s",
                        command, recipe.id, self._session.recipe_id)
            return False
        return True

    def _log_outcome(self, recipe_id: str, outcome: TickOutcome) -> None:
        if outcome == TickOutcome.STEP_ADVANCED:
            log.info("Session for %s advanced to step %d", recipe_id, self._session.current_step_index)
        elif outcome == TickOutcome.FINISHED:
            log.info("Session for %s finished", recipe_id)
        else:
            log.debug("tick %s for %s", outcome.value, recipe_id)
