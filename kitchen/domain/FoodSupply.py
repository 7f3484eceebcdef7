"""Food supply domain entity: a stocked ingredient with unit price and on-hand quantity."""
from datetime import date
from typing import Optional

from kitchen.utilities.parsing import format_date, parse_date, parse_number


class FoodSupplyItem:
    def __init__(self, id: str = "", name: str = "", unit: str = "", price_per_unit: float = 0.0,
                 quantity: float = 0.0, category: str = "other", expiration_date: Optional[date] = None):
        self.id = id
        self.name = name
        self.unit = unit
        self.price_per_unit = price_per_unit
        self.quantity = quantity
        self.category = category
        self.expiration_date = expiration_date

    def adjust_quantity(self, delta: float):
        '''Adjusts the on-hand stock by the specified delta (can be negative).'''
        self.quantity += delta

    def stock_value(self) -> float:
        return self.quantity * self.price_per_unit

    def __str__(self) -> str:
        parts = [f"{self.name} - {self.quantity} {self.unit} @ {self.price_per_unit}/{self.unit}"]
        if self.expiration_date:
            parts.append(f"Exp: {format_date(self.expiration_date)}")
        return " - ".join(parts)

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates a FoodSupplyItem from a dictionary. Accepts camelCase keys, ignores unknown ones.'''
        d = dict(data) if isinstance(data, dict) else {}
        price = d.get("price_per_unit", d.get("pricePerUnit"))
        expiration = d.get("expiration_date", d.get("expirationDate"))
        return FoodSupplyItem(
            id=str(d.get("id") or ""),
            name=d.get("name") or "",
            unit=d.get("unit") or "",
            price_per_unit=max(parse_number(price), 0.0),
            quantity=parse_number(d.get("quantity")),
            category=str(d.get("category") or "other").strip().lower() or "other",
            expiration_date=parse_date(expiration),
        )

    def to_dict(self):
        '''Converts the FoodSupplyItem to a dictionary for JSON persistence.'''
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "price_per_unit": self.price_per_unit,
            "quantity": self.quantity,
            "category": self.category,
            "expiration_date": format_date(self.expiration_date),
        }
