"""Recipe cost engine.

Pure functions over in-memory snapshots of the food-supply price table and the
recipe store. Nothing here reads files or mutates its inputs; callers hand in
whatever repositories they loaded.

Cost rules:
  food line       quantity * price_per_unit * (1 + waste_percentage / 100)
  sub-recipe line cost_per_serving(sub-recipe) * quantity
  per serving     total_cost / max(servings, 1)

A missing food supply prices at 0 and a missing sub-recipe costs 0. Use
find_unresolved_references() to report those lookups instead of zeroing them.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from kitchen.domain.FoodSupply import FoodSupplyItem
from kitchen.domain.Recipe import Recipe
from kitchen.domain.RecipeIngredient import FoodIngredient, RecipeIngredient, SubrecipeIngredient
from kitchen.utilities.parsing import parse_number

__all__ = [
    "CircularSubrecipeError", "index_by_id", "food_ingredient_cost", "food_waste_cost",
    "subrecipe_ingredient_cost", "ingredient_cost", "calculate_total_cost",
    "calculate_cost_per_serving", "calculate_total_waste_amount", "net_after_waste",
    "gross_profit", "compute_cost_breakdown", "find_unresolved_references", "find_subrecipe_cycle",
    "flatten_ingredients",
]

SupplyIndex = Mapping[str, FoodSupplyItem]
RecipeIndex = Mapping[str, Recipe]
SupplySource = Union[SupplyIndex, Iterable[FoodSupplyItem]]
RecipeSource = Union[RecipeIndex, Iterable[Recipe]]


class CircularSubrecipeError(ValueError):
    """Raised when sub-recipe references loop back onto a recipe already being expanded."""

    def __init__(self, path: List[str]):
        self.path = list(path)
        super().__init__("Circular sub-recipe reference: " + " -> ".join(self.path))


def index_by_id(items) -> Dict[str, Any]:
    """Return an id -> item mapping; mappings are passed through untouched."""
    if items is None:
        return {}
    if isinstance(items, Mapping):
        return dict(items)
    return {item.id: item for item in items}


# --- Per-line costs ------------------------------------------------------------

def food_ingredient_cost(quantity: float, price_per_unit: float, waste_percentage: float = 0.0) -> float:
    """Base cost plus the cost of the wasted share of the used quantity."""
    base = quantity * price_per_unit
    return base + food_waste_cost(quantity, price_per_unit, waste_percentage)


def food_waste_cost(quantity: float, price_per_unit: float, waste_percentage: float) -> float:
    return quantity * (waste_percentage / 100) * price_per_unit


def subrecipe_ingredient_cost(cost_per_serving: float, quantity: float) -> float:
    return cost_per_serving * quantity


def _price_of(ingredient: FoodIngredient, supplies: SupplyIndex) -> float:
    supply = supplies.get(ingredient.food_supply_id)
    return supply.price_per_unit if supply else 0.0


def ingredient_cost(ingredient: RecipeIngredient, supplies: SupplyIndex, recipes: RecipeIndex) -> float:
    """Cost contributed by a single line, using the current price table and recipe snapshots."""
    if isinstance(ingredient, FoodIngredient):
        return food_ingredient_cost(ingredient.quantity, _price_of(ingredient, supplies),
                                    ingredient.waste_percentage)
    if isinstance(ingredient, SubrecipeIngredient):
        sub = recipes.get(ingredient.sub_recipe_id)
        cost_per_serving = sub.cost_per_serving if sub else 0.0
        return subrecipe_ingredient_cost(cost_per_serving, ingredient.quantity)
    return 0.0


# --- Recipe totals -------------------------------------------------------------

def calculate_total_cost(ingredients: Iterable[RecipeIngredient], food_supplies: SupplySource,
                         all_recipes: RecipeSource) -> float:
    supplies = index_by_id(food_supplies)
    recipes = index_by_id(all_recipes)
    return sum((ingredient_cost(ing, supplies, recipes) for ing in ingredients), 0.0)


def calculate_cost_per_serving(total_cost: float, servings: Any) -> float:
    """Divide by servings, falling back to 1 when servings is absent, invalid or below 1."""
    count = parse_number(servings, 1.0)
    return total_cost / max(count, 1)


def calculate_total_waste_amount(ingredients: Iterable[RecipeIngredient], food_supplies: SupplySource,
                                 all_recipes: RecipeSource, *, _path: Tuple[str, ...] = ()) -> float:
    """Value of everything wasted by one batch, including waste inside nested sub-recipes.

    A sub-recipe contributes its own batch waste multiplied by the servings
    consumed, at every nesting level. Raises CircularSubrecipeError if a
    sub-recipe is reached again while it is still being expanded.
    """
    supplies = index_by_id(food_supplies)
    recipes = index_by_id(all_recipes)
    total = 0.0
    for ing in ingredients:
        if isinstance(ing, FoodIngredient):
            if ing.waste_percentage > 0:
                total += food_waste_cost(ing.quantity, _price_of(ing, supplies), ing.waste_percentage)
        elif isinstance(ing, SubrecipeIngredient):
            sub = recipes.get(ing.sub_recipe_id)
            if sub is None:
                continue
            if sub.id in _path:
                raise CircularSubrecipeError(list(_path) + [sub.id])
            sub_waste = calculate_total_waste_amount(sub.ingredients, supplies, recipes,
                                                     _path=_path + (sub.id,))
            total += sub_waste * ing.quantity
    return total


def net_after_waste(selling_price: Optional[float], total_waste: float) -> Optional[float]:
    """Selling price minus waste value; None when the recipe has no positive selling price."""
    if not selling_price or selling_price <= 0:
        return None
    return selling_price - total_waste


def gross_profit(selling_price: Optional[float], total_cost: float) -> Optional[float]:
    if not selling_price or selling_price <= 0:
        return None
    return selling_price - total_cost


def compute_cost_breakdown(ingredients: Iterable[RecipeIngredient], food_supplies: SupplySource,
                           all_recipes: RecipeSource, servings: Any,
                           selling_price: Optional[float] = None, *, recipe_id: Optional[str] = None,
                           is_subrecipe: bool = False) -> Dict[str, Optional[float]]:
    """All the numbers a recipe form shows, computed in one pass over the same snapshot.

    Returns:
        { total_cost, cost_per_serving, total_waste_amount, net_after_waste, profit }
    recipe_id, when given, seeds the cycle guard so a recipe that contains
    itself is reported instead of being expanded. A sub-recipe has no
    selling price: with is_subrecipe, net_after_waste and profit are None.
    """
    lines = list(ingredients)
    supplies = index_by_id(food_supplies)
    recipes = index_by_id(all_recipes)
    total_cost = calculate_total_cost(lines, supplies, recipes)
    path = (recipe_id,) if recipe_id else ()
    total_waste = calculate_total_waste_amount(lines, supplies, recipes, _path=path)
    if is_subrecipe:
        selling_price = None
    return {
        "total_cost": total_cost,
        "cost_per_serving": calculate_cost_per_serving(total_cost, servings),
        "total_waste_amount": total_waste,
        "net_after_waste": net_after_waste(selling_price, total_waste),
        "profit": gross_profit(selling_price, total_cost),
    }


# --- Reference checks ----------------------------------------------------------

def find_unresolved_references(ingredients: Iterable[RecipeIngredient], food_supplies: SupplySource,
                               all_recipes: RecipeSource) -> List[Dict[str, str]]:
    """List the lines whose food supply or sub-recipe cannot be found.

    Each entry is {type, id}. The cost functions price these lines at zero,
    so callers that persist costs should reject them first.
    """
    supplies = index_by_id(food_supplies)
    recipes = index_by_id(all_recipes)
    missing: List[Dict[str, str]] = []
    for ing in ingredients:
        if isinstance(ing, FoodIngredient) and ing.food_supply_id not in supplies:
            missing.append({"type": ing.type, "id": ing.food_supply_id})
        elif isinstance(ing, SubrecipeIngredient) and ing.sub_recipe_id not in recipes:
            missing.append({"type": ing.type, "id": ing.sub_recipe_id})
    return missing


def find_subrecipe_cycle(recipe_id: str, ingredients: Iterable[RecipeIngredient],
                         all_recipes: RecipeSource) -> Optional[List[str]]:
    """Return the first sub-recipe path that leads back to an open recipe, or None.

    recipe_id is the recipe being saved; its ingredients are checked as given
    (not as stored) so an update can be validated before it is written.
    """
    recipes = index_by_id(all_recipes)

    def walk(lines: Iterable[RecipeIngredient], path: List[str]) -> Optional[List[str]]:
        for ing in lines:
            if not isinstance(ing, SubrecipeIngredient):
                continue
            if ing.sub_recipe_id in path:
                return path + [ing.sub_recipe_id]
            sub = recipes.get(ing.sub_recipe_id)
            if sub is None:
                continue
            found = walk(sub.ingredients, path + [sub.id])
            if found:
                return found
        return None

    return walk(ingredients, [recipe_id] if recipe_id else [])


# --- Display helpers -----------------------------------------------------------

def flatten_ingredients(ingredients: Iterable[RecipeIngredient], food_supplies: SupplySource,
                        all_recipes: RecipeSource, *, recipe_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Ingredient rows for display: each sub-recipe row is followed by its own lines.

    Quantities are shown as written on each recipe, not scaled. depth is 0 for
    the recipe's own lines and grows by one per nesting level.
    """
    supplies = index_by_id(food_supplies)
    recipes = index_by_id(all_recipes)
    rows: List[Dict[str, Any]] = []

    def walk(lines: Iterable[RecipeIngredient], depth: int, path: Tuple[str, ...]):
        for ing in lines:
            row = {
                "type": ing.type,
                "quantity": ing.quantity,
                "cost": ingredient_cost(ing, supplies, recipes),
                "depth": depth,
            }
            if isinstance(ing, FoodIngredient):
                supply = supplies.get(ing.food_supply_id)
                row.update(food_supply_id=ing.food_supply_id, name=supply.name if supply else "Unknown",
                           unit=supply.unit if supply else "", waste_percentage=ing.waste_percentage)
                rows.append(row)
                continue
            sub = recipes.get(ing.sub_recipe_id)
            row.update(sub_recipe_id=ing.sub_recipe_id, name=sub.name if sub else "Unknown",
                       unit="", waste_percentage=0.0)
            rows.append(row)
            if sub is None:
                continue
            if sub.id in path:
                raise CircularSubrecipeError(list(path) + [sub.id])
            walk(sub.ingredients, depth + 1, path + (sub.id,))

    walk(ingredients, 0, (recipe_id,) if recipe_id else ())
    return rows
