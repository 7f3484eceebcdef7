"""Event helper utilities.

Helpers for publishing food supply alert events on the global event bus.

Quick import:
    from kitchen.events.event_helpers import (
        publish_low_stock, publish_near_expiry, publish_supply_alerts
    )
"""
from __future__ import annotations
from typing import Iterable, Any
from .Event_Bus import (
    create_event, FOOD_SUPPLY_LOW_STOCK, FOOD_SUPPLY_NEAR_EXPIRY
)
from kitchen.logic.supplies.analysis import days_until_expiry, low_stock_threshold
from kitchen.utilities.config import DAYS_BEFORE_EXPIRY

__all__ = [
    'publish_low_stock', 'publish_near_expiry', 'publish_supply_alerts',
]


def publish_low_stock(supply: Any, remaining: float, threshold: float):
    """Publish a food_supply.low_stock event."""
    create_event(FOOD_SUPPLY_LOW_STOCK, {
        'supply': supply,
        'remaining': remaining,
        'threshold': threshold
    })


def publish_near_expiry(supply: Any, days_left: int, threshold: int):
    """Publish a food_supply.near_expiry event."""
    create_event(FOOD_SUPPLY_NEAR_EXPIRY, {
        'supply': supply,
        'days_left': days_left,
        'threshold': threshold
    })


def publish_supply_alerts(supplies: Iterable[Any]) -> int:
    """Publish low-stock / near-expiry events for every supply that needs one.

    Returns the number of events published.
    """
    published = 0
    for supply in supplies:
        th = low_stock_threshold(supply.unit)
        if th > 0 and supply.quantity <= th:
            publish_low_stock(supply, supply.quantity, th)
            published += 1
        days_left = days_until_expiry(supply)
        if days_left is not None and days_left <= DAYS_BEFORE_EXPIRY:
            publish_near_expiry(supply, days_left, DAYS_BEFORE_EXPIRY)
            published += 1
    return published
