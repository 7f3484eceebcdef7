import logging
from typing import List, Optional

from kitchen.domain.Recipe import Recipe
from kitchen.infra import paths
from kitchen.infra.json_store import atomic_write, read_records

logger = logging.getLogger(__name__)


def reading_from_recipes() -> List[Recipe]:
    """Read recipes from JSON file with proper error handling."""
    return [Recipe.from_dict(entry) for entry in read_records(paths.RECIPES_FILE, "Recipes")]


class RecipeRepository:
    def list_all(self) -> List[Recipe]:
        return reading_from_recipes()

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return next((r for r in self.list_all() if r.id == recipe_id), None)

    def save_all(self, recipes: List[Recipe]) -> None:
        atomic_write(paths.RECIPES_FILE, [r.to_dict() for r in recipes])

    def add(self, recipe: Recipe) -> Recipe:
        recipes = self.list_all()
        recipes.append(recipe)
        self.save_all(recipes)
        logger.info("Saved recipe %s (%s)", recipe.name, recipe.id)
        return recipe

    def update(self, recipe: Recipe) -> bool:
        recipes = self.list_all()
        for i, existing in enumerate(recipes):
            if existing.id == recipe.id:
                recipes[i] = recipe
                self.save_all(recipes)
                return True
        return False

    def delete(self, recipe_id: str) -> bool:
        recipes = self.list_all()
        remaining = [r for r in recipes if r.id != recipe_id]
        if len(remaining) == len(recipes):
            return False
        self.save_all(remaining)
        logger.info("Deleted recipe %s", recipe_id)
        return True

    def users_of(self, recipe_id: str) -> List[Recipe]:
        """Recipes that consume recipe_id as a sub-recipe."""
        return [r for r in self.list_all() if r.uses_subrecipe(recipe_id)]

    def users_of_supply(self, food_supply_id: str) -> List[Recipe]:
        return [r for r in self.list_all() if r.uses_food_supply(food_supply_id)]
