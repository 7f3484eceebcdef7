"""Simple Event Bus / Observer implementation for food supply alerts.

Event names used so far:
  food_supply.low_stock -> payload {"supply": FoodSupplyItem, "remaining": float, "threshold": float}
  food_supply.near_expiry -> payload {"supply": FoodSupplyItem, "days_left": int, "threshold": int}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
FOOD_SUPPLY_LOW_STOCK = "food_supply.low_stock"
FOOD_SUPPLY_NEAR_EXPIRY = "food_supply.near_expiry"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback in self._subscribers.get(event_name, []):
			self._subscribers[event_name].remove(callback)

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def create_event(event_name: str, payload: Any = None) -> None:
	"""Publish an event on the global bus (sugar function)."""
	GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'create_event',
	'FOOD_SUPPLY_LOW_STOCK', 'FOOD_SUPPLY_NEAR_EXPIRY'
]
