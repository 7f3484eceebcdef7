"""Recipe usage: expand a recipe into food-supply requirements and consume them.

A usage run cooks `servings_used` portions of a recipe. Top-level food lines
are multiplied by servings_used; the lines of a nested sub-recipe are
multiplied by the consuming multiplier times the sub-recipe quantity, at every
depth.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Tuple

from kitchen.domain.Recipe import Recipe
from kitchen.domain.RecipeIngredient import FoodIngredient, SubrecipeIngredient
from kitchen.domain.RecipeUsage import RecipeUsage
from kitchen.logic.costing.engine import (
    CircularSubrecipeError, RecipeSource, SupplySource, food_waste_cost, index_by_id
)

__all__ = ["InsufficientStockError", "collect_requirements", "find_insufficient", "use_recipe", "touched_supply_ids"]

logger = logging.getLogger(__name__)

UNKNOWN_SUPPLY_NAME = "Unknown"


class InsufficientStockError(ValueError):
    """Raised when on-hand stock does not cover a usage run and forcing was not requested."""

    def __init__(self, shortages: List[Dict[str, Any]]):
        self.shortages = shortages
        names = ", ".join(s["name"] for s in shortages)
        super().__init__(f"Insufficient ingredients: {names}")


def collect_requirements(recipe: Recipe, servings_used: float, food_supplies: SupplySource,
                         all_recipes: RecipeSource) -> List[Dict[str, Any]]:
    """Flatten a recipe into one requirement per food line reached.

    Each entry: { food_supply_id, name, unit, required, waste_percentage, source }
    where source is the name of the recipe or sub-recipe the line belongs to.
    Lines pointing at a missing food supply are kept with name "Unknown" so
    they show up as shortages. Missing sub-recipes contribute nothing.
    """
    supplies = index_by_id(food_supplies)
    recipes = index_by_id(all_recipes)
    requirements: List[Dict[str, Any]] = []

    def expand(source: Recipe, multiplier: float, path: Tuple[str, ...]):
        for ing in source.ingredients:
            if isinstance(ing, FoodIngredient):
                supply = supplies.get(ing.food_supply_id)
                requirements.append({
                    "food_supply_id": ing.food_supply_id,
                    "name": supply.name if supply else UNKNOWN_SUPPLY_NAME,
                    "unit": supply.unit if supply else "",
                    "required": ing.quantity * multiplier,
                    "waste_percentage": ing.waste_percentage,
                    "source": source.name,
                })
            elif isinstance(ing, SubrecipeIngredient):
                sub = recipes.get(ing.sub_recipe_id)
                if sub is None:
                    logger.warning("Sub-recipe %s referenced by %s not found", ing.sub_recipe_id, source.name)
                    continue
                if sub.id in path:
                    raise CircularSubrecipeError(list(path) + [sub.id])
                expand(sub, multiplier * ing.quantity, path + (sub.id,))

    expand(recipe, servings_used, (recipe.id,))
    return requirements


def find_insufficient(requirements: List[Dict[str, Any]], food_supplies: SupplySource) -> List[Dict[str, Any]]:
    """Return { name, required, available, unit } for every supply the stock cannot cover.

    Requirements on the same supply are summed before comparing.
    """
    supplies = index_by_id(food_supplies)
    totals: Dict[str, Dict[str, Any]] = {}
    for req in requirements:
        entry = totals.setdefault(req["food_supply_id"], {
            "name": req["name"], "required": 0.0, "unit": req["unit"],
        })
        entry["required"] += req["required"]

    shortages = []
    for supply_id, entry in totals.items():
        supply = supplies.get(supply_id)
        available = supply.quantity if supply else 0.0
        if available < entry["required"]:
            shortages.append({
                "name": entry["name"],
                "required": entry["required"],
                "available": available,
                "unit": entry["unit"],
            })
    return shortages


def use_recipe(recipe: Recipe, servings_used: float, food_supplies: SupplySource, all_recipes: RecipeSource,
               *, force_use: bool = False, kitchen_id: str = "", notes: str = "") -> RecipeUsage:
    """Consume stock for a usage run and return the usage record.

    The FoodSupplyItem objects passed in are decremented in place; the caller
    persists them together with the returned RecipeUsage. With force_use the
    run goes ahead on whatever is on hand, deducting min(required, available)
    per line. Without it, any shortage raises InsufficientStockError and
    nothing is deducted.

    cost = price * deducted, waste = deducted * waste% * price (per line),
    selling_price = recipe selling price * servings_used (0 for a sub-recipe) and
    profit = selling_price - cost - waste.
    """
    if servings_used is None or servings_used <= 0:
        raise ValueError("servings_used must be positive")

    supplies = index_by_id(food_supplies)
    requirements = collect_requirements(recipe, servings_used, supplies, all_recipes)

    if not force_use:
        shortages = find_insufficient(requirements, supplies)
        if shortages:
            raise InsufficientStockError(shortages)

    total_cost = 0.0
    total_waste = 0.0
    consumptions: List[Dict[str, Any]] = []
    for req in requirements:
        supply = supplies.get(req["food_supply_id"])
        if supply is None:
            continue
        deducted = min(req["required"], max(supply.quantity, 0.0)) if force_use else req["required"]
        if deducted <= 0:
            continue
        cost = supply.price_per_unit * deducted
        waste = food_waste_cost(deducted, supply.price_per_unit, req["waste_percentage"])
        supply.adjust_quantity(-deducted)
        total_cost += cost
        total_waste += waste
        consumptions.append({
            "food_supply_id": supply.id,
            "name": supply.name,
            "unit": supply.unit,
            "quantity": deducted,
            "cost": cost,
            "waste": waste,
            "notes": notes or f"Used in recipe: {req['source']}",
        })

    selling_price = 0.0 if recipe.is_subrecipe else (recipe.selling_price or 0.0) * servings_used
    usage = RecipeUsage(
        recipe_id=recipe.id,
        servings_used=servings_used,
        cost=total_cost,
        waste=total_waste,
        selling_price=selling_price,
        profit=selling_price - total_cost - total_waste,
        kitchen_id=kitchen_id,
        notes=notes,
        consumptions=consumptions,
    )
    logger.info("Recipe %s used x%s: cost %.2f, waste %.2f, profit %.2f",
                recipe.name, servings_used, usage.cost, usage.waste, usage.profit)
    return usage


def touched_supply_ids(usage: RecipeUsage) -> List[str]:
    """Ids of the supplies a usage run deducted from, in first-seen order."""
    seen: Dict[str, None] = {}
    for c in usage.consumptions:
        seen.setdefault(c["food_supply_id"], None)
    return list(seen)
