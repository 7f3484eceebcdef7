from typing import Final

DATE_FORMAT: Final[str] = "%d-%m-%Y"

# Ingredient line discriminators
FOOD: Final[str] = "food"
SUBRECIPE: Final[str] = "subrecipe"

MAX_WASTE_PERCENTAGE: Final[float] = 100.0
DEFAULT_SUBRECIPE_QUANTITY: Final[float] = 1.0
POPULAR_RECIPES_LIMIT: Final[int] = 10
