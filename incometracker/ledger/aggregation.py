"""Mini README: Totals and monthly income rollups.

Structure:
    * AggregationEngine - sums over shipment subsets and completion months.

Values use ``Decimal`` end to end; an empty subset totals ``Decimal("0")``.
Monthly figures are keyed by the UTC month of ``completed_at`` and only
count shipments whose status is currently COMPLETE.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List

from ..domain import MonthlyIncome, Shipment, month_tag
from ..logging_utils import get_logger
from .filters import FilterEngine

LOGGER = get_logger(__name__)


class AggregationEngine:
    """Derive totals and monthly reports from filtered shipment subsets."""

    def __init__(self, filters: FilterEngine) -> None:
        self._filters = filters

    @staticmethod
    def total_value(subset: Iterable[Shipment]) -> Decimal:
        """Sum of ``effective_quantity * unit_price`` over ``subset``."""

        return sum((shipment.total_value for shipment in subset), Decimal("0"))

    @staticmethod
    def total_quantity(subset: Iterable[Shipment]) -> int:
        """Effective quantity shipped, returns excluded."""

        return sum(shipment.effective_quantity for shipment in subset)

    @staticmethod
    def count(subset: Iterable[Shipment]) -> int:
        return sum(1 for _ in subset)

    def available_completion_months(self) -> List[str]:
        """Distinct ``MM-YYYY`` completion months, most recent first."""

        months: List[str] = []
        seen = set()
        for shipment in self._filters.completed():
            tag = month_tag(shipment.completed_at)
            if tag not in seen:
                seen.add(tag)
                months.append(tag)
        LOGGER.debug("Found %s months with completed shipments", len(months))
        return months

    def completed_shipments_by_month(self, tag: str) -> List[Shipment]:
        return self._filters.completed_in_month(tag)

    def completed_value_by_month(self, tag: str) -> Decimal:
        return self.total_value(self._filters.completed_in_month(tag))

    def monthly_income(self) -> List[MonthlyIncome]:
        """Completed income per month for every month that has any."""

        totals: Dict[str, Decimal] = {}
        for shipment in self._filters.completed():
            tag = month_tag(shipment.completed_at)
            totals[tag] = totals.get(tag, Decimal("0")) + shipment.total_value
        return [MonthlyIncome(month=tag, total_value=value) for tag, value in totals.items()]
