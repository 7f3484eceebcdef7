"""Recipe usage log (file persistence)."""
from typing import List

from kitchen.domain.RecipeUsage import RecipeUsage
from kitchen.infra import paths
from kitchen.infra.json_store import atomic_write, read_records


class UsageRepository:
    def list_all(self) -> List[RecipeUsage]:
        return [RecipeUsage.from_dict(entry) for entry in read_records(paths.USAGES_FILE, "Recipe usages")]

    def for_recipe(self, recipe_id: str) -> List[RecipeUsage]:
        return [u for u in self.list_all() if u.recipe_id == recipe_id]

    def add(self, usage: RecipeUsage) -> RecipeUsage:
        usages = self.list_all()
        usages.append(usage)
        atomic_write(paths.USAGES_FILE, [u.to_dict() for u in usages])
        return usage

    def delete_for_recipe(self, recipe_id: str) -> int:
        usages = self.list_all()
        remaining = [u for u in usages if u.recipe_id != recipe_id]
        removed = len(usages) - len(remaining)
        if removed:
            atomic_write(paths.USAGES_FILE, [u.to_dict() for u in remaining])
        return removed
