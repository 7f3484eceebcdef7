"""
Input validation schemas using Pydantic for better data integrity.

Every schema accepts both snake_case field names and the camelCase names the
dashboard forms send (pricePerUnit, wastePercentage, subRecipeId, ...).
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Literal, Optional

from kitchen.domain.RecipeIngredient import (
    FoodIngredient, RecipeIngredient, SubrecipeIngredient,
    normalize_subrecipe_quantity, normalize_waste_percentage
)
from kitchen.utilities.constants import FOOD, SUBRECIPE
from kitchen.utilities.parsing import parse_date


class _InputModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


def _check_expiration(v):
    """Accept DD-MM-YYYY or ISO dates; blank means no expiration."""
    if v is None or not v.strip():
        return None
    if parse_date(v) is None:
        raise ValueError('Expiration date must be DD-MM-YYYY or YYYY-MM-DD')
    return v


class FoodSupplyInput(_InputModel):
    """Schema for creating a food supply."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    unit: str = Field(..., min_length=1, max_length=20)
    price_per_unit: float = Field(..., ge=0, alias="pricePerUnit")
    quantity: float = Field(0, ge=0)
    category: str = Field("other", max_length=50)
    expiration_date: Optional[str] = Field(None, alias="expirationDate")

    @field_validator('expiration_date')
    @classmethod
    def validate_expiration(cls, v):
        return _check_expiration(v)

    @field_validator('category')
    @classmethod
    def normalize_category(cls, v):
        return (v or 'other').lower()


class FoodSupplyUpdateInput(_InputModel):
    """Schema for a partial food supply update (price or stock changes)."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    price_per_unit: Optional[float] = Field(None, ge=0, alias="pricePerUnit")
    quantity: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=50)
    expiration_date: Optional[str] = Field(None, alias="expirationDate")

    @field_validator('expiration_date')
    @classmethod
    def validate_expiration(cls, v):
        return _check_expiration(v)


class RecipeIngredientInput(_InputModel):
    """One ingredient line: a food supply with waste, or a sub-recipe.

    Waste outside 0..100 is clamped rather than rejected; a missing or
    non-positive sub-recipe quantity means one serving.
    """
    type: Optional[Literal["food", "subrecipe"]] = None
    food_supply_id: Optional[str] = Field(None, alias="foodSupplyId")
    sub_recipe_id: Optional[str] = Field(None, alias="subRecipeId")
    quantity: Optional[float] = None
    waste_percentage: Optional[float] = Field(None, alias="wastePercentage")

    @field_validator('waste_percentage', mode='before')
    @classmethod
    def clamp_waste(cls, v):
        return normalize_waste_percentage(v)

    @model_validator(mode='after')
    def check_line(self):
        if self.type is None:
            self.type = SUBRECIPE if self.sub_recipe_id else FOOD
        if self.type == FOOD:
            if not self.food_supply_id:
                raise ValueError('Food ingredient requires foodSupplyId')
            if self.quantity is None or self.quantity <= 0:
                raise ValueError('Food ingredient quantity must be greater than 0')
        else:
            if not self.sub_recipe_id:
                raise ValueError('Subrecipe ingredient requires subRecipeId')
            self.quantity = normalize_subrecipe_quantity(self.quantity)
        return self

    def to_ingredient(self) -> RecipeIngredient:
        if self.type == SUBRECIPE:
            return SubrecipeIngredient(sub_recipe_id=self.sub_recipe_id, quantity=self.quantity)
        return FoodIngredient(food_supply_id=self.food_supply_id, quantity=self.quantity,
                              waste_percentage=self.waste_percentage or 0.0)


class RecipeInput(_InputModel):
    """Schema for creating or replacing a recipe."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    servings: int = Field(..., ge=1)
    prep_time: int = Field(0, ge=0, alias="prepTime")
    instructions: str = ""
    selling_price: Optional[float] = Field(None, ge=0, alias="sellingPrice")
    is_subrecipe: bool = Field(False, alias="isSubrecipe")
    ingredients: List[RecipeIngredientInput]

    @field_validator('ingredients')
    @classmethod
    def validate_ingredients(cls, v):
        """Ensure recipe has at least one ingredient."""
        if not v:
            raise ValueError('Recipe must have at least one ingredient')
        return v

    def to_ingredients(self) -> List[RecipeIngredient]:
        return [ing.to_ingredient() for ing in self.ingredients]


class CostPreviewInput(_InputModel):
    """Unsaved form state; servings and ingredients may still be incomplete."""
    recipe_id: Optional[str] = Field(None, alias="recipeId")
    servings: Optional[float] = 1
    selling_price: Optional[float] = Field(None, alias="sellingPrice")
    is_subrecipe: bool = Field(False, alias="isSubrecipe")
    ingredients: List[RecipeIngredientInput] = Field(default_factory=list)

    def to_ingredients(self) -> List[RecipeIngredient]:
        return [ing.to_ingredient() for ing in self.ingredients]


class RecipeUseInput(_InputModel):
    """Schema for recording a recipe usage run."""
    servings_used: float = Field(1, gt=0, alias="servingsUsed")
    force_use: bool = Field(False, alias="forceUse")
    kitchen_id: str = Field("", alias="kitchenId")
    notes: str = ""
