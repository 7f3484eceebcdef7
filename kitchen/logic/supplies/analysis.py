"""Food supply stock analysis helpers (low stock and near expiry)."""
from __future__ import annotations
from datetime import date as _date
from typing import List, Dict, Any, Iterable, Optional
from kitchen.domain.FoodSupply import FoodSupplyItem
from kitchen.utilities.config import LOW_STOCK_THRESHOLD, DAYS_BEFORE_EXPIRY
from kitchen.utilities.parsing import format_date

__all__ = ["low_stock_threshold", "days_until_expiry", "compute_expiring_soon", "compute_low_stock"]


def low_stock_threshold(unit: str) -> float:
    return LOW_STOCK_THRESHOLD.get((unit or '').strip().lower(), 0)


def days_until_expiry(item: FoodSupplyItem, *, today: Optional[_date] = None) -> Optional[int]:
    if item.expiration_date is None:
        return None
    return (item.expiration_date - (today or _date.today())).days


def compute_expiring_soon(supplies: Iterable[FoodSupplyItem], *, window: int | None = None,
                          today: Optional[_date] = None) -> List[Dict[str, Any]]:
    """Return supplies expiring in <= window days (including already expired)."""
    expiring_window = window if window is not None else DAYS_BEFORE_EXPIRY
    result: List[Dict[str, Any]] = []
    for item in supplies:
        days_left = days_until_expiry(item, today=today)
        if days_left is None or days_left > expiring_window:
            continue
        result.append({
            'id': item.id,
            'name': item.name,
            'quantity': item.quantity,
            'unit': item.unit,
            'exp': format_date(item.expiration_date),
            'days_left': days_left,
            'category': item.category,
        })
    result.sort(key=lambda x: (x['days_left'], x['name']))
    return result


def compute_low_stock(supplies: Iterable[FoodSupplyItem]) -> List[Dict[str, Any]]:
    """Return supplies whose stock is below or equal to the LOW_STOCK_THRESHOLD for their unit.

    Units without a configured threshold are never reported.
    """
    low: List[Dict[str, Any]] = []
    for item in supplies:
        th = low_stock_threshold(item.unit)
        if th > 0 and item.quantity <= th:
            low.append({
                'id': item.id,
                'name': item.name,
                'quantity': item.quantity,
                'unit': item.unit,
                'threshold': th,
                'category': item.category,
            })
    low.sort(key=lambda x: (x['quantity'], x['name']))
    return low
