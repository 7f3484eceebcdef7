from pathlib import Path

from kitchen.utilities.config import DATA_DIR as _CONFIGURED_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIGURED_DATA_DIR).resolve()
FOOD_SUPPLIES_FILE = DATA_DIR / 'food_supplies.json'
RECIPES_FILE = DATA_DIR / 'recipes.json'
USAGES_FILE = DATA_DIR / 'recipe_usages.json'

__all__ = ['DATA_DIR', 'FOOD_SUPPLIES_FILE', 'RECIPES_FILE', 'USAGES_FILE']
