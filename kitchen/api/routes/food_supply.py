from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Body, HTTPException, Query

from kitchen.api.request_body import parse_body
from kitchen.domain.FoodSupply import FoodSupplyItem
from kitchen.events.event_helpers import publish_supply_alerts
from kitchen.events.web_observers import get_events as get_web_events
from kitchen.infra.FoodSupply_Repository import FoodSupplyRepository
from kitchen.infra.Recipe_Repository import RecipeRepository
from kitchen.infra.json_store import store_lock
from kitchen.logic.supplies.analysis import compute_expiring_soon, compute_low_stock
from kitchen.utilities.parsing import parse_date
from kitchen.utilities.validators import FoodSupplyInput, FoodSupplyUpdateInput

router = APIRouter(prefix="/api/food-supply", tags=["food-supply"])


def _supply_view(item: FoodSupplyItem) -> dict:
    data = item.to_dict()
    data["stock_value"] = item.stock_value()
    return data


@router.get("")
def list_food_supplies(
    category: Optional[str] = Query(default=None),
    low_stock: bool = Query(default=False),
    expiring_soon: bool = Query(default=False),
):
    """Return the price/stock table, optionally narrowed to one category or to alerting items."""
    supplies = FoodSupplyRepository().list_all()
    if category:
        supplies = [s for s in supplies if s.category == category.strip().lower()]
    if low_stock:
        low_ids = {row['id'] for row in compute_low_stock(supplies)}
        supplies = [s for s in supplies if s.id in low_ids]
    if expiring_soon:
        exp_ids = {row['id'] for row in compute_expiring_soon(supplies)}
        supplies = [s for s in supplies if s.id in exp_ids]
    return [_supply_view(s) for s in supplies]


@router.get("/alerts")
def food_supply_alerts(
    since: Optional[int] = Query(default=None, description="Return events with id greater than this value")
):
    """
    Return recent food supply alert events (low stock, near expiry).

    Client polling strategy:
        1. First call without 'since' to load current backlog (optional).
        2. Store 'next_cursor' from response.
        3. Subsequent polls: /api/food-supply/alerts?since=<next_cursor>
    """
    if since is None:
        snapshot = get_web_events(None)
        if not snapshot['events']:
            # empty buffer: seed it from the current stock levels
            publish_supply_alerts(FoodSupplyRepository().list_all())
            snapshot = get_web_events(None)
        return snapshot
    return get_web_events(since)


@router.get("/{supply_id}")
def get_food_supply(supply_id: str):
    item = FoodSupplyRepository().get(supply_id)
    if not item:
        raise HTTPException(status_code=404, detail='Food supply not found')
    return _supply_view(item)


@router.post("", status_code=201)
def add_food_supply(data: dict = Body(...)):
    payload = parse_body(FoodSupplyInput, data)
    repo = FoodSupplyRepository()
    item = FoodSupplyItem(
        id=payload.id or str(uuid4()),
        name=payload.name,
        unit=payload.unit,
        price_per_unit=payload.price_per_unit,
        quantity=payload.quantity,
        category=payload.category,
        expiration_date=parse_date(payload.expiration_date),
    )
    with store_lock:
        if repo.get(item.id):
            raise HTTPException(status_code=400, detail='Food supply already exists')
        repo.add(item)
    publish_supply_alerts([item])
    return _supply_view(item)


@router.put("/{supply_id}")
def edit_food_supply(supply_id: str, data: dict = Body(...)):
    """Partial update; stored recipe cost snapshots keep their old prices until refreshed."""
    payload = parse_body(FoodSupplyUpdateInput, data)
    repo = FoodSupplyRepository()
    changes = payload.model_dump(exclude_unset=True)
    with store_lock:
        item = repo.get(supply_id)
        if not item:
            raise HTTPException(status_code=404, detail='Food supply not found')
        for field in ('name', 'unit', 'price_per_unit', 'quantity'):
            if changes.get(field) is not None:
                setattr(item, field, changes[field])
        if changes.get('category'):
            item.category = changes['category'].lower()
        if 'expiration_date' in changes:
            item.expiration_date = parse_date(changes['expiration_date'])
        repo.update(item)
    publish_supply_alerts([item])
    return _supply_view(item)


@router.delete("/{supply_id}")
def delete_food_supply(supply_id: str):
    repo = FoodSupplyRepository()
    with store_lock:
        if not repo.get(supply_id):
            raise HTTPException(status_code=404, detail='Food supply not found')
        users = RecipeRepository().users_of_supply(supply_id)
        if users:
            raise HTTPException(status_code=400, detail='Food supply is used by recipes: '
                                + ', '.join(r.name for r in users))
        repo.delete(supply_id)
    return {"success": True}
