"""Recipe domain entity: servings, typed ingredient lines and the persisted cost snapshot."""
from datetime import datetime, timezone
from typing import List, Optional

from kitchen.domain.RecipeIngredient import (
    FoodIngredient, RecipeIngredient, SubrecipeIngredient, ingredient_from_dict
)
from kitchen.utilities.parsing import parse_bool, parse_number


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Recipe:
    def __init__(self, id: str = "", name: str = "", servings: int = 1,
                 ingredients: Optional[List[RecipeIngredient]] = None, instructions: str = "",
                 description: str = "", prep_time: int = 0, total_cost: float = 0.0,
                 cost_per_serving: float = 0.0, selling_price: Optional[float] = None,
                 is_subrecipe: bool = False, created_at: str = "", updated_at: str = ""):
        self.id = id
        self.name = name
        self.servings = servings
        self.ingredients = ingredients[:] if ingredients else []
        self.instructions = instructions
        self.description = description
        self.prep_time = prep_time
        self.total_cost = total_cost
        self.cost_per_serving = cost_per_serving
        self.selling_price = selling_price
        self.is_subrecipe = is_subrecipe
        self.created_at = created_at or _now_iso()
        self.updated_at = updated_at or self.created_at

    def __str__(self) -> str:
        kind = "Subrecipe" if self.is_subrecipe else "Recipe"
        return (f"{kind} {self.name} - {self.servings} servings - {len(self.ingredients)} ingredients"
                f" - total {self.total_cost:.2f} ({self.cost_per_serving:.2f}/serving)")

    __repr__ = __str__

    def food_ingredients(self) -> List[FoodIngredient]:
        return [ing for ing in self.ingredients if isinstance(ing, FoodIngredient)]

    def subrecipe_ingredients(self) -> List[SubrecipeIngredient]:
        return [ing for ing in self.ingredients if isinstance(ing, SubrecipeIngredient)]

    def uses_food_supply(self, food_supply_id: str) -> bool:
        return any(ing.food_supply_id == food_supply_id for ing in self.food_ingredients())

    def uses_subrecipe(self, recipe_id: str) -> bool:
        return any(ing.sub_recipe_id == recipe_id for ing in self.subrecipe_ingredients())

    def apply_cost_snapshot(self, total_cost: float, cost_per_serving: float):
        '''Stores freshly computed costs; the snapshot is what later reads see.'''
        self.total_cost = total_cost
        self.cost_per_serving = cost_per_serving
        self.updated_at = _now_iso()
        return self

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        is_subrecipe = parse_bool(d.get("is_subrecipe", d.get("isSubrecipe")))
        selling = None if is_subrecipe else d.get("selling_price", d.get("sellingPrice"))
        return Recipe(
            id=str(d.get("id") or ""),
            name=d.get("name") or "",
            servings=int(parse_number(d.get("servings"), 1)),
            ingredients=[ingredient_from_dict(ing) for ing in d.get("ingredients") or []],
            instructions=d.get("instructions") or "",
            description=d.get("description") or "",
            prep_time=int(parse_number(d.get("prep_time", d.get("prepTime")), 0)),
            total_cost=parse_number(d.get("total_cost", d.get("totalCost"))),
            cost_per_serving=parse_number(d.get("cost_per_serving", d.get("costPerServing"))),
            selling_price=None if selling in (None, "") else parse_number(selling),
            is_subrecipe=is_subrecipe,
            created_at=d.get("created_at", d.get("createdAt")) or "",
            updated_at=d.get("updated_at", d.get("updatedAt")) or "",
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "servings": self.servings,
            "prep_time": self.prep_time,
            "instructions": self.instructions,
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "total_cost": self.total_cost,
            "cost_per_serving": self.cost_per_serving,
            "selling_price": self.selling_price,
            "is_subrecipe": self.is_subrecipe,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
