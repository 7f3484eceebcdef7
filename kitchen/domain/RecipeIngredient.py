"""Recipe ingredient lines: a food supply line (with waste) or a nested sub-recipe line."""
from typing import Optional, Union

from kitchen.utilities.constants import (
    DEFAULT_SUBRECIPE_QUANTITY, FOOD, MAX_WASTE_PERCENTAGE, SUBRECIPE
)
from kitchen.utilities.parsing import parse_number


def normalize_waste_percentage(value) -> float:
    """Waste is a percentage in 0..100; absent or invalid means no waste."""
    waste = parse_number(value, 0.0)
    if waste < 0:
        return 0.0
    return min(waste, MAX_WASTE_PERCENTAGE)


def normalize_subrecipe_quantity(value) -> float:
    """Servings of a sub-recipe consumed; absent, invalid or <= 0 means one serving."""
    quantity = parse_number(value, DEFAULT_SUBRECIPE_QUANTITY)
    return quantity if quantity > 0 else DEFAULT_SUBRECIPE_QUANTITY


class FoodIngredient:
    type = FOOD

    def __init__(self, food_supply_id: str = "", quantity: float = 0.0, waste_percentage: float = 0.0,
                 name: str = "", unit: str = "", id: Optional[str] = None):
        self.id = id
        self.food_supply_id = food_supply_id
        self.quantity = quantity
        self.waste_percentage = waste_percentage
        self.name = name
        self.unit = unit

    def __str__(self) -> str:
        label = self.name or self.food_supply_id
        return f"{label} - {self.quantity} {self.unit} (waste {self.waste_percentage}%)".strip()

    __repr__ = __str__

    def to_dict(self):
        return {
            "id": self.id,
            "type": FOOD,
            "food_supply_id": self.food_supply_id,
            "name": self.name,
            "unit": self.unit,
            "quantity": self.quantity,
            "waste_percentage": self.waste_percentage,
        }


class SubrecipeIngredient:
    type = SUBRECIPE

    def __init__(self, sub_recipe_id: str = "", quantity: float = DEFAULT_SUBRECIPE_QUANTITY,
                 name: str = "", id: Optional[str] = None):
        self.id = id
        self.sub_recipe_id = sub_recipe_id
        self.quantity = quantity
        self.name = name

    def __str__(self) -> str:
        return f"{self.name or self.sub_recipe_id} x {self.quantity} serving(s)"

    __repr__ = __str__

    def to_dict(self):
        return {
            "id": self.id,
            "type": SUBRECIPE,
            "sub_recipe_id": self.sub_recipe_id,
            "name": self.name,
            "quantity": self.quantity,
        }


RecipeIngredient = Union[FoodIngredient, SubrecipeIngredient]


def ingredient_from_dict(data) -> RecipeIngredient:
    '''Builds the right ingredient line from a dictionary (snake_case or camelCase keys).

    The line type comes from "type"; without it, a sub-recipe id marks a
    sub-recipe line and anything else is treated as food.
    '''
    d = dict(data) if isinstance(data, dict) else {}
    sub_recipe_id = d.get("sub_recipe_id", d.get("subRecipeId"))
    kind = d.get("type") or (SUBRECIPE if sub_recipe_id else FOOD)
    line_id = d.get("id")
    if kind == SUBRECIPE:
        return SubrecipeIngredient(
            sub_recipe_id=str(sub_recipe_id or ""),
            quantity=normalize_subrecipe_quantity(d.get("quantity")),
            name=d.get("name", d.get("subRecipeName")) or "",
            id=line_id,
        )
    return FoodIngredient(
        food_supply_id=str(d.get("food_supply_id", d.get("foodSupplyId")) or ""),
        quantity=parse_number(d.get("quantity")),
        waste_percentage=normalize_waste_percentage(d.get("waste_percentage", d.get("wastePercentage"))),
        name=d.get("name") or "",
        unit=d.get("unit") or "",
        id=line_id,
    )
