from typing import Any, Dict, List, Optional

from tortoise.expressions import F

from ...common.repository import BaseRepository, QueryOptions, with_retry
from .models import InventoryItem, Location
from .schemas import InventoryItemRow, LocationRow


class InventoryItemRepository(BaseRepository[InventoryItem, InventoryItemRow]):
    model = InventoryItem
    row_schema = InventoryItemRow
    default_order = "name"

    async def find_needing_restock(
        self,
        filters: Optional[Dict[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> List[InventoryItemRow]:
        """Items whose balance is at or below their restock threshold."""
        options = options or QueryOptions(order_by="current_quantity")

        async def _fetch():
            query = self.model.filter(**(filters or {})).filter(
                current_quantity__lte=F("minimum_quantity")
            )
            return await self._apply_options(query, options)

        instances = await with_retry(_fetch, "InventoryItem.find_needing_restock")
        return [self.to_row(instance) for instance in instances]


class LocationRepository(BaseRepository[Location, LocationRow]):
    model = Location
    row_schema = LocationRow
    default_order = "name"
