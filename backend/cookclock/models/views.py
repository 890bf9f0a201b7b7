from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .recipe import Recipe, RecipeTotals
from .session import Session, SessionProgress


class StartRequest(BaseModel):
    recipe_id: str


class RecipeView(BaseModel):
    recipe: Recipe
    totals: RecipeTotals

    @classmethod
    def of(cls, recipe: Recipe) -> "RecipeView":
        return cls(recipe=recipe, totals=recipe.totals())


class SessionView(BaseModel):
    """What the presentation layer renders: the snapshot plus derived progress."""

    event: Optional[str] = None
    active_recipe_id: Optional[str] = None
    session: Optional[Session] = None
    progress: Optional[SessionProgress] = None
