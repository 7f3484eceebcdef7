import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import APIRouter, Body, HTTPException, Query

from kitchen.api.request_body import parse_body
from kitchen.domain.FoodSupply import FoodSupplyItem
from kitchen.domain.Recipe import Recipe
from kitchen.domain.RecipeIngredient import FoodIngredient, RecipeIngredient, SubrecipeIngredient
from kitchen.events.event_helpers import publish_supply_alerts
from kitchen.infra.FoodSupply_Repository import FoodSupplyRepository
from kitchen.infra.Recipe_Repository import RecipeRepository
from kitchen.infra.Usage_Repository import UsageRepository
from kitchen.infra.json_store import store_lock
from kitchen.logic.costing.engine import (
    CircularSubrecipeError, compute_cost_breakdown, find_subrecipe_cycle,
    find_unresolved_references, flatten_ingredients, gross_profit, index_by_id
)
from kitchen.logic.costing.usage import InsufficientStockError, touched_supply_ids, use_recipe
from kitchen.logic.reporting.popularity import compute_usage_stats, empty_usage_stats, popular_recipes
from kitchen.utilities.config import CURRENCY
from kitchen.utilities.constants import FOOD
from kitchen.utilities.validators import CostPreviewInput, RecipeInput, RecipeUseInput

router = APIRouter(prefix="/api/recipes", tags=["recipes"])
logger = logging.getLogger(__name__)


# -------------------- Helpers --------------------
def _cycle_detail(path: List[str], recipes: Dict[str, Recipe]) -> str:
    names = [recipes[rid].name if rid in recipes else rid for rid in path]
    return "Circular reference detected: " + " -> ".join(names)


def _resolve_ingredients(ingredients: List[RecipeIngredient], supplies: Dict[str, FoodSupplyItem],
                         recipes: Dict[str, Recipe], recipe_id: str) -> List[RecipeIngredient]:
    """Check references for a recipe about to be saved and copy display names onto the lines."""
    missing = find_unresolved_references(ingredients, supplies, recipes)
    if missing:
        first = missing[0]
        what = "Food supply" if first["type"] == FOOD else "Subrecipe"
        raise HTTPException(status_code=404, detail=f"{what} not found for ingredient: {first['id']}")

    for ing in ingredients:
        if isinstance(ing, FoodIngredient):
            supply = supplies[ing.food_supply_id]
            ing.name, ing.unit = supply.name, supply.unit
        elif isinstance(ing, SubrecipeIngredient):
            sub = recipes[ing.sub_recipe_id]
            if not sub.is_subrecipe:
                raise HTTPException(status_code=400,
                                    detail=f"Selected recipe is not a subrecipe: {ing.sub_recipe_id}")
            ing.name = sub.name
        ing.id = ing.id or str(uuid4())

    cycle = find_subrecipe_cycle(recipe_id, ingredients, recipes)
    if cycle:
        raise HTTPException(status_code=400, detail=_cycle_detail(cycle, recipes))
    return ingredients


def _breakdown(recipe: Recipe, supplies, recipes) -> Dict[str, Optional[float]]:
    try:
        return compute_cost_breakdown(recipe.ingredients, supplies, recipes, recipe.servings,
                                      recipe.selling_price, recipe_id=recipe.id,
                                      is_subrecipe=recipe.is_subrecipe)
    except CircularSubrecipeError as e:
        raise HTTPException(status_code=400, detail=_cycle_detail(e.path, index_by_id(recipes)))


def _recipe_summary(recipe: Recipe, supplies, recipes, stats: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    data = recipe.to_dict()
    data.update(stats.get(recipe.id) or empty_usage_stats())
    try:
        breakdown = compute_cost_breakdown(recipe.ingredients, supplies, recipes, recipe.servings,
                                           recipe.selling_price, recipe_id=recipe.id,
                                           is_subrecipe=recipe.is_subrecipe)
        data["total_waste_amount"] = breakdown["total_waste_amount"]
    except CircularSubrecipeError as e:
        logger.warning("Recipe %s has a circular sub-recipe chain: %s", recipe.id, e.path)
        data["total_waste_amount"] = None
    return data


def _apply_payload(recipe: Recipe, payload: RecipeInput, ingredients: List[RecipeIngredient]) -> Recipe:
    recipe.name = payload.name
    recipe.description = payload.description
    recipe.servings = payload.servings
    recipe.prep_time = payload.prep_time
    recipe.instructions = payload.instructions
    recipe.is_subrecipe = payload.is_subrecipe
    recipe.selling_price = None if payload.is_subrecipe else payload.selling_price
    recipe.ingredients = ingredients
    return recipe


# -------------------- API: Recipes --------------------
@router.get("")
def list_recipes(
    subrecipes_only: bool = Query(default=False),
    popular: bool = Query(default=False),
):
    """Return recipes with usage stats and their current total waste amount.

    popular=true returns the most used recipes instead, most used first.
    """
    recipe_list = RecipeRepository().list_all()
    usages = UsageRepository().list_all()
    supplies = index_by_id(FoodSupplyRepository().list_all())
    recipes = index_by_id(recipe_list)
    stats = compute_usage_stats(usages)

    if popular:
        selected = popular_recipes(recipe_list, usages)
    else:
        selected = [r for r in recipe_list if r.is_subrecipe] if subrecipes_only else recipe_list
    return [_recipe_summary(r, supplies, recipes, stats) for r in selected]


@router.post("", status_code=201)
def create_recipe(data: dict = Body(...)):
    payload = parse_body(RecipeInput, data)
    repo = RecipeRepository()
    with store_lock:
        recipes = index_by_id(repo.list_all())
        supplies = index_by_id(FoodSupplyRepository().list_all())

        recipe = Recipe(id=str(uuid4()))
        ingredients = _resolve_ingredients(payload.to_ingredients(), supplies, recipes, recipe.id)
        _apply_payload(recipe, payload, ingredients)
        breakdown = _breakdown(recipe, supplies, recipes)
        recipe.apply_cost_snapshot(breakdown["total_cost"], breakdown["cost_per_serving"])
        repo.add(recipe)
    return recipe.to_dict()


@router.post("/cost-preview")
def cost_preview(data: dict = Body(...)):
    """Live numbers for an unsaved recipe form; unresolved references price at zero and are listed."""
    payload = parse_body(CostPreviewInput, data)
    recipes = index_by_id(RecipeRepository().list_all())
    supplies = index_by_id(FoodSupplyRepository().list_all())
    ingredients = payload.to_ingredients()
    try:
        breakdown = compute_cost_breakdown(ingredients, supplies, recipes, payload.servings,
                                           payload.selling_price, recipe_id=payload.recipe_id,
                                           is_subrecipe=payload.is_subrecipe)
    except CircularSubrecipeError as e:
        raise HTTPException(status_code=400, detail=_cycle_detail(e.path, recipes))
    breakdown["unresolved"] = find_unresolved_references(ingredients, supplies, recipes)
    breakdown["currency"] = CURRENCY
    return breakdown


@router.get("/{recipe_id}")
def recipe_detail(recipe_id: str):
    """Return the stored snapshot plus live costs, usage stats and the flattened ingredient list."""
    recipe_list = RecipeRepository().list_all()
    recipes = index_by_id(recipe_list)
    recipe = recipes.get(recipe_id)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    supplies = index_by_id(FoodSupplyRepository().list_all())
    stats = compute_usage_stats(UsageRepository().for_recipe(recipe_id))

    current = _breakdown(recipe, supplies, recipes)
    data = recipe.to_dict()
    data.update(stats.get(recipe_id) or empty_usage_stats())
    data["total_waste_amount"] = current["total_waste_amount"]
    data["net_after_waste"] = current["net_after_waste"]
    data["profit"] = None if recipe.is_subrecipe else gross_profit(recipe.selling_price, recipe.total_cost)
    data["current_costs"] = current
    data["currency"] = CURRENCY
    data["flattened_ingredients"] = flatten_ingredients(recipe.ingredients, supplies, recipes,
                                                        recipe_id=recipe.id)
    return data


@router.put("/{recipe_id}")
def update_recipe(recipe_id: str, data: dict = Body(...)):
    payload = parse_body(RecipeInput, data)
    repo = RecipeRepository()
    with store_lock:
        recipes = index_by_id(repo.list_all())
        recipe = recipes.get(recipe_id)
        if not recipe:
            raise HTTPException(status_code=404, detail="Recipe not found")
        if recipe.is_subrecipe and not payload.is_subrecipe:
            users = repo.users_of(recipe_id)
            if users:
                raise HTTPException(status_code=400, detail="Recipe is used as a subrecipe by: "
                                    + ", ".join(u.name for u in users))
        supplies = index_by_id(FoodSupplyRepository().list_all())

        ingredients = _resolve_ingredients(payload.to_ingredients(), supplies, recipes, recipe_id)
        _apply_payload(recipe, payload, ingredients)
        breakdown = _breakdown(recipe, supplies, recipes)
        recipe.apply_cost_snapshot(breakdown["total_cost"], breakdown["cost_per_serving"])
        repo.update(recipe)
    return recipe.to_dict()


@router.delete("/{recipe_id}")
def delete_recipe(recipe_id: str):
    repo = RecipeRepository()
    with store_lock:
        if not repo.get(recipe_id):
            raise HTTPException(status_code=404, detail="Recipe not found")
        users = repo.users_of(recipe_id)
        if users:
            raise HTTPException(status_code=400, detail="Recipe is used as a subrecipe by: "
                                + ", ".join(u.name for u in users))
        repo.delete(recipe_id)
        removed = UsageRepository().delete_for_recipe(recipe_id)
    return {"success": True, "deleted_usages": removed}


@router.post("/{recipe_id}/refresh-costs")
def refresh_recipe_costs(recipe_id: str):
    """Recompute the stored cost snapshot from the current price table."""
    repo = RecipeRepository()
    with store_lock:
        recipes = index_by_id(repo.list_all())
        recipe = recipes.get(recipe_id)
        if not recipe:
            raise HTTPException(status_code=404, detail="Recipe not found")
        supplies = index_by_id(FoodSupplyRepository().list_all())
        breakdown = _breakdown(recipe, supplies, recipes)
        recipe.apply_cost_snapshot(breakdown["total_cost"], breakdown["cost_per_serving"])
        repo.update(recipe)
    return recipe.to_dict()


@router.post("/{recipe_id}/use")
def use_recipe_endpoint(recipe_id: str, data: dict = Body(default={})):
    """Cook servings of a recipe: deduct stock, log the usage and raise stock alerts."""
    payload = parse_body(RecipeUseInput, data)
    supply_repo = FoodSupplyRepository()
    with store_lock:
        recipes = index_by_id(RecipeRepository().list_all())
        recipe = recipes.get(recipe_id)
        if not recipe:
            raise HTTPException(status_code=404, detail="Recipe not found")
        supplies = index_by_id(supply_repo.list_all())

        try:
            usage = use_recipe(recipe, payload.servings_used, supplies, recipes, force_use=payload.force_use,
                               kitchen_id=payload.kitchen_id, notes=payload.notes)
        except InsufficientStockError as e:
            raise HTTPException(status_code=400, detail={"error": "Insufficient ingredients",
                                                         "insufficient_ingredients": e.shortages})
        except CircularSubrecipeError as e:
            raise HTTPException(status_code=400, detail=_cycle_detail(e.path, recipes))

        touched = [supplies[sid] for sid in touched_supply_ids(usage)]
        supply_repo.update_many(touched)
        UsageRepository().add(usage)
    publish_supply_alerts(touched)
    return {"success": True, "message": "Recipe used successfully", "recipe_usage": usage.to_dict()}
