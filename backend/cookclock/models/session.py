from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, conint

from .recipe import Recipe


class TickOutcome(str, Enum):
    NOOP = "noop"
    TICKED = "ticked"
    STEP_ADVANCED = "step_advanced"
    FINISHED = "finished"


class Session(BaseModel):
    """Runtime state of the one recipe being cooked. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    recipe_id: str
    current_step_index: conint(ge=0) = 0
    is_running: bool = True
    step_remaining_sec: conint(ge=0) = 0
    overall_remaining_sec: conint(ge=0) = 0
    last_sample_ts: Optional[float] = None


class SessionProgress(BaseModel):
    step_fraction: float
    overall_fraction: float
    step_percent: int
    overall_percent: int
    step_clock: str
    overall_clock: str


def format_clock(total_sec: int) -> str:
    # MM:SS, minutes are not wrapped at the hour
    total_sec = max(0, int(total_sec))
    return f"{total_sec // 60:02d}:{total_sec % 60:02d}"


def _fraction(remaining: int, duration: int) -> float:
    if duration <= 0:
        return 0.0
    return min(1.0, max(0.0, 1 - remaining / duration))


def _percent(fraction: float) -> int:
    # halves round up, not to even
    return math.floor(fraction * 100 + 0.5)


def compute_progress(session: Session, recipe: Recipe) -> SessionProgress:
    step_fraction = _fraction(session.step_remaining_sec, recipe.step_duration_sec(session.current_step_index))
    overall_fraction = _fraction(session.overall_remaining_sec, recipe.total_duration_sec)
    return SessionProgress(
        step_fraction=step_fraction,
        overall_fraction=overall_fraction,
        step_percent=_percent(step_fraction),
        overall_percent=_percent(overall_fraction),
        step_clock=format_clock(session.step_remaining_sec),
        overall_clock=format_clock(session.overall_remaining_sec),
    )
