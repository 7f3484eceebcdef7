import json
import pytest
from kitchen.events import web_observers
from kitchen.infra import paths

SUPPLIES = [
    {"id": "fs-1", "name": "Chicken Breast", "unit": "g", "price_per_unit": 0.03, "quantity": 5000, "category": "meat"},
    {"id": "fs-2", "name": "Fettuccine", "unit": "g", "price_per_unit": 0.0125, "quantity": 4000, "category": "grains"},
    {"id": "fs-3", "name": "Heavy Cream", "unit": "ml", "price_per_unit": 0.032, "quantity": 2000, "category": "dairy"},
    {"id": "fs-4", "name": "Parmesan", "unit": "g", "price_per_unit": 0.07, "quantity": 1000, "category": "dairy"},
]


@pytest.fixture
def data_files(tmp_path, monkeypatch):
    """Point every repository at empty-but-seeded JSON files under tmp_path."""
    supplies_file = tmp_path / "food_supplies.json"
    recipes_file = tmp_path / "recipes.json"
    usages_file = tmp_path / "recipe_usages.json"
    supplies_file.write_text(json.dumps(SUPPLIES), encoding="utf-8")
    recipes_file.write_text("[]", encoding="utf-8")
    usages_file.write_text("[]", encoding="utf-8")
    monkeypatch.setattr(paths, "FOOD_SUPPLIES_FILE", supplies_file)
    monkeypatch.setattr(paths, "RECIPES_FILE", recipes_file)
    monkeypatch.setattr(paths, "USAGES_FILE", usages_file)
    web_observers.reset()
    return {"supplies": supplies_file, "recipes": recipes_file, "usages": usages_file}
