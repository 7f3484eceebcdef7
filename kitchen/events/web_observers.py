"""Web-facing observers for food supply events.

This module subscribes to the GLOBAL_EVENT_BUS for:
  - food_supply.low_stock
  - food_supply.near_expiry

and stores a lightweight in-memory ring buffer of recent events that the
alerts endpoint serves to polling clients.

Design:
  * Each event stored with an auto-increment integer id (cursor) so clients
    can request only newer events (since=<last_id_seen>).
  * A Lock guards the buffer; with several worker processes each keeps its own.
  * MAX_EVENTS caps the buffer size.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import (
    GLOBAL_EVENT_BUS, FOOD_SUPPLY_LOW_STOCK, FOOD_SUPPLY_NEAR_EXPIRY
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300  # keep a few hundred recent events
_started = False


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat()
        }
        if isinstance(payload, dict):
            supply = payload.get('supply')
            if isinstance(supply, dict):
                for k in ('id', 'name', 'unit', 'quantity'):
                    if k in supply:
                        evt[k if k != 'id' else 'food_supply_id'] = supply[k]
            elif supply is not None:
                evt['food_supply_id'] = getattr(supply, 'id', '')
                evt['name'] = getattr(supply, 'name', '')
                evt['unit'] = getattr(supply, 'unit', '')
                evt['quantity'] = getattr(supply, 'quantity', '')
            for k in ('remaining', 'threshold', 'days_left'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]
    logger.debug("Recorded %s event #%s", event_name, evt['id'])


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    GLOBAL_EVENT_BUS.subscribe(FOOD_SUPPLY_LOW_STOCK, _record)
    GLOBAL_EVENT_BUS.subscribe(FOOD_SUPPLY_NEAR_EXPIRY, _record)
    _started = True


def reset():
    """Drop buffered events and restart the cursor."""
    global _next_id
    with _lock:
        _events.clear()
        _next_id = 1


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the last N (up to MAX_EVENTS) events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'reset', 'get_events', 'MAX_EVENTS']
