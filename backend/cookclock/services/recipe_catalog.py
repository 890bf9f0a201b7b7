"""
In-memory recipe registry. Recipes are immutable, so the catalog only
adds, looks up and removes whole values.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import TypeAdapter

from ..models.recipe import Recipe

log = logging.getLogger(__name__)

_recipe_list = TypeAdapter(List[Recipe])


class RecipeNotFoundError(KeyError):
    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(recipe_id)

    def __str__(self) -> str:
        return f"Recipe {self.recipe_id} not found"


class RecipeCatalog:
    def __init__(self, recipes: Optional[List[Recipe]] = None):
        self._items: Dict[str, Recipe] = {}
        for recipe in recipes or []:
            self.add(recipe)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, recipe: Recipe) -> Recipe:
        if recipe.id in self._items:
            raise ValueError(f"Recipe {recipe.id} already exists")
        self._items[recipe.id] = recipe
        log.info("Recipe added: %s (%s)", recipe.id, recipe.title)
        return recipe

    def get(self, recipe_id: str) -> Recipe:
        try:
            return self._items[recipe_id]
        except KeyError:
            raise RecipeNotFoundError(recipe_id) from None

    def find(self, recipe_id: str) -> Optional[Recipe]:
        return self._items.get(recipe_id)

    def list(self) -> List[Recipe]:
        return list(self._items.values())

    def remove(self, recipe_id: str) -> None:
        if self._items.pop(recipe_id, None) is None:
            raise RecipeNotFoundError(recipe_id)
        log.info("Recipe removed: %s", recipe_id)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RecipeCatalog":
        """Load a JSON array of recipes. Any invalid entry fails the whole load."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        recipes = _recipe_list.validate_python(raw)
        log.info("Loaded %d recipes from %s", len(recipes), path)
        return cls(recipes)
