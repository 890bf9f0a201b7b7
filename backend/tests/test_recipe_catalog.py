import json

import pytest
from pydantic import ValidationError

from backend.cookclock.services.recipe_catalog import RecipeCatalog, RecipeNotFoundError


def test_add_get_remove(make_recipe):
    catalog = RecipeCatalog()
    recipe = catalog.add(make_recipe(2, recipe_id="soup"))

    assert catalog.get("soup") is recipe
    assert catalog.find("nope") is None
    assert catalog.list() == [recipe]
    assert len(catalog) == 1

    with pytest.raises(ValueError):
        catalog.add(make_recipe(1, recipe_id="soup"))

    catalog.remove("soup")
    with pytest.raises(RecipeNotFoundError):
        catalog.get("soup")
    with pytest.raises(RecipeNotFoundError):
        catalog.remove("soup")


def test_from_file(tmp_path, make_recipe):
    path = tmp_path / "recipes.json"
    recipes = [make_recipe(2, recipe_id="a"), make_recipe(1, 1, recipe_id="b")]
    path.write_text(json.dumps([r.model_dump(mode="json") for r in recipes]))

    catalog = RecipeCatalog.from_file(path)
    assert [r.id for r in catalog.list()] == ["a", "b"]
    assert catalog.get("b").total_duration_sec == 120


def test_from_file_rejects_invalid_recipe(tmp_path):
    path = tmp_path / "recipes.json"
    path.write_text(json.dumps([{"id": "x", "title": "Broken", "steps": []}]))

    with pytest.raises(ValidationError):
        RecipeCatalog.from_file(path)
