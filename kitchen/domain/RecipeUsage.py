"""Recipe usage record: one cooking run of a recipe with its cost, waste and profit."""
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4


class RecipeUsage:
    def __init__(self, recipe_id: str = "", servings_used: float = 1, cost: float = 0.0, waste: float = 0.0,
                 selling_price: float = 0.0, profit: float = 0.0, kitchen_id: str = "", notes: str = "",
                 consumptions: Optional[List[Dict]] = None, id: str = "", created_at: str = ""):
        self.id = id or str(uuid4())
        self.recipe_id = recipe_id
        self.servings_used = servings_used
        self.cost = cost
        self.waste = waste
        self.selling_price = selling_price
        self.profit = profit
        self.kitchen_id = kitchen_id
        self.notes = notes
        self.consumptions = consumptions[:] if consumptions else []
        self.created_at = created_at or datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"Usage {self.recipe_id} x{self.servings_used} - cost {self.cost:.2f} - profit {self.profit:.2f}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"id", "recipe_id", "servings_used", "cost", "waste", "selling_price", "profit",
                   "kitchen_id", "notes", "consumptions", "created_at"}
        return RecipeUsage(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "id": self.id,
            "recipe_id": self.recipe_id,
            "servings_used": self.servings_used,
            "cost": self.cost,
            "waste": self.waste,
            "selling_price": self.selling_price,
            "profit": self.profit,
            "kitchen_id": self.kitchen_id,
            "notes": self.notes,
            "consumptions": self.consumptions,
            "created_at": self.created_at,
        }
