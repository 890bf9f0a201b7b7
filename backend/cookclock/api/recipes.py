import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..core.session_engine import SessionEngine
from ..models.recipe import Recipe
from ..models.views import RecipeView
from ..services.recipe_catalog import RecipeCatalog, RecipeNotFoundError
from .dependencies import get_catalog, get_engine

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


@router.get("", response_model=List[RecipeView])
async def list_recipes(catalog: RecipeCatalog = Depends(get_catalog)):
    return [RecipeView.of(r) for r in catalog.list()]


@router.post("", response_model=RecipeView, status_code=201)
async def create_recipe(recipe: Recipe, catalog: RecipeCatalog = Depends(get_catalog)):
    try:
        catalog.add(recipe)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return RecipeView.of(recipe)


@router.get("/{recipe_id}", response_model=RecipeView)
async def get_recipe(recipe_id: str, catalog: RecipeCatalog = Depends(get_catalog)):
    try:
        return RecipeView.of(catalog.get(recipe_id))
    except RecipeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{recipe_id}", status_code=204)
async def delete_recipe(
    recipe_id: str,
    catalog: RecipeCatalog = Depends(get_catalog),
    engine: SessionEngine = Depends(get_engine),
):
    # the tick source looks the recipe up on every tick
    if engine.active_recipe_id == recipe_id:
        raise HTTPException(status_code=409, detail="Recipe is being cooked")
    try:
        catalog.remove(recipe_id)
    except RecipeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
