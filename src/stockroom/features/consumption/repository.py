import datetime
from typing import List, Optional

from ...common.repository import BaseRepository, QueryOptions, with_retry
from .models import ConsumptionRecord
from .schemas import ConsumptionRow


class ConsumptionRecordRepository(BaseRepository[ConsumptionRecord, ConsumptionRow]):
    model = ConsumptionRecord
    row_schema = ConsumptionRow
    default_order = "recorded_at"

    async def find_by_date_range(
        self,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
        options: Optional[QueryOptions] = None,
    ) -> List[ConsumptionRow]:
        """Records with ``start_date <= recorded_at <= end_date``, newest first by default."""
        options = options or QueryOptions(order_by="recorded_at", ascending=False)

        async def _fetch():
            query = ConsumptionRecord.filter(
                recorded_at__gte=start_date, recorded_at__lte=end_date
            )
            return await self._apply_options(query, options)

        records = await with_retry(_fetch, "ConsumptionRecord.find_by_date_range")
        return [self.to_row(record) for record in records]
