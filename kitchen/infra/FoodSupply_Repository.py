"""Food supply repository (file persistence)."""
import logging
from typing import List, Optional

from kitchen.domain.FoodSupply import FoodSupplyItem
from kitchen.infra import paths
from kitchen.infra.json_store import atomic_write, read_records

logger = logging.getLogger(__name__)


class FoodSupplyRepository:
    def list_all(self) -> List[FoodSupplyItem]:
        return [FoodSupplyItem.from_dict(entry) for entry in read_records(paths.FOOD_SUPPLIES_FILE, "Food supplies")]

    def get(self, supply_id: str) -> Optional[FoodSupplyItem]:
        return next((s for s in self.list_all() if s.id == supply_id), None)

    def save_all(self, supplies: List[FoodSupplyItem]) -> None:
        atomic_write(paths.FOOD_SUPPLIES_FILE, [s.to_dict() for s in supplies])

    def add(self, supply: FoodSupplyItem) -> FoodSupplyItem:
        supplies = self.list_all()
        if any(s.id == supply.id for s in supplies):
            raise ValueError(f"Food supply {supply.id} already exists")
        supplies.append(supply)
        self.save_all(supplies)
        logger.info("Added food supply %s (%s)", supply.name, supply.id)
        return supply

    def update(self, supply: FoodSupplyItem) -> bool:
        supplies = self.list_all()
        for i, existing in enumerate(supplies):
            if existing.id == supply.id:
                supplies[i] = supply
                self.save_all(supplies)
                return True
        return False

    def update_many(self, changed: List[FoodSupplyItem]) -> None:
        """Replace every stored supply that appears in changed, in a single write."""
        by_id = {s.id: s for s in changed}
        supplies = [by_id.get(s.id, s) for s in self.list_all()]
        self.save_all(supplies)

    def delete(self, supply_id: str) -> bool:
        supplies = self.list_all()
        remaining = [s for s in supplies if s.id != supply_id]
        if len(remaining) == len(supplies):
            return False
        self.save_all(remaining)
        logger.info("Deleted food supply %s", supply_id)
        return True
