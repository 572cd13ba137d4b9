"""Mini README: Composite shipment filters.

Structure:
    * ShipmentFilter - optional product/status/date/month criteria.
    * FilterEngine - turns a filter into one SQL predicate and runs it.

Every criterion that is present is AND-ed into a single predicate; absent
criteria impose nothing, so an empty filter matches every shipment. Date
bounds are inclusive and apply to ``created_at``. A month tag selects the
whole UTC calendar month. An inverted date range simply matches nothing and
an unparseable month tag is logged and treated as "no match" rather than
raised to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import List, Optional, Union

from sqlalchemy import ColumnElement, and_, false, true

from ..domain import Product, Shipment, ShipmentStatus, as_utc, format_month_tag, month_tag, month_window
from ..errors import InvalidFilter
from ..logging_utils import get_logger
from ..storage import RecordStore, ShipmentRow

LOGGER = get_logger(__name__)

DateBound = Union[date, datetime]


def _coerce_bound(value: DateBound, *, upper: bool) -> datetime:
    """Plain dates cover the whole UTC day; naive datetimes are taken as UTC."""

    if isinstance(value, datetime):
        return as_utc(value)
    return datetime.combine(value, time.max if upper else time.min, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class ShipmentFilter:
    """Selection criteria for shipment lists; every field is optional."""

    product: Optional[Product] = None
    status: Optional[ShipmentStatus] = None
    date_start: Optional[DateBound] = None
    date_end: Optional[DateBound] = None
    month_tag: Optional[str] = None

    @classmethod
    def for_month(cls, year: int, month: int) -> "ShipmentFilter":
        """Filter spanning a calendar month, expressed both as bounds and tag."""

        tag = format_month_tag(year, month)
        start, end = month_window(tag)
        return cls(date_start=start, date_end=end, month_tag=tag)

    def has_filters(self) -> bool:
        return any(
            value is not None
            for value in (self.product, self.status, self.date_start, self.date_end, self.month_tag)
        )

    def matches(self, shipment: Shipment) -> bool:
        """In-memory equivalent of the SQL predicate built by ``FilterEngine``."""

        if self.product is not None and shipment.product is not self.product:
            return False
        if self.status is not None and shipment.status is not self.status:
            return False
        created_at = as_utc(shipment.created_at)
        if self.date_start is not None and created_at < _coerce_bound(self.date_start, upper=False):
            return False
        if self.date_end is not None and created_at > _coerce_bound(self.date_end, upper=True):
            return False
        if self.month_tag is not None:
            try:
                month_window(self.month_tag)
            except InvalidFilter:
                return False
            if month_tag(created_at) != self.month_tag.strip():
                return False
        return True


class FilterEngine:
    """Select shipments from the record store with a composite predicate."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def predicate(self, criteria: ShipmentFilter) -> ColumnElement[bool]:
        """Return the AND of every present criterion as a SQL expression."""

        clauses: List[ColumnElement[bool]] = []
        if criteria.product is not None:
            clauses.append(ShipmentRow.product == Product(criteria.product).value)
        if criteria.status is not None:
            clauses.append(ShipmentRow.status == ShipmentStatus(criteria.status).value)
        if criteria.date_start is not None:
            clauses.append(ShipmentRow.created_at >= _coerce_bound(criteria.date_start, upper=False))
        if criteria.date_end is not None:
            clauses.append(ShipmentRow.created_at <= _coerce_bound(criteria.date_end, upper=True))
        if criteria.month_tag is not None:
            try:
                start, end = month_window(criteria.month_tag)
            except InvalidFilter as error:
                LOGGER.warning("Ignoring shipments for invalid month filter: %s", error)
                return false()
            clauses.append(ShipmentRow.created_at.between(start, end))
        if not clauses:
            return true()
        return and_(*clauses)

    def apply(self, criteria: ShipmentFilter) -> List[Shipment]:
        """Matching shipments, newest first."""

        shipments = self._store.scan(self.predicate(criteria)).to_list()
        LOGGER.debug("Filter %s matched %s shipments", criteria, len(shipments))
        return shipments

    def completed_in_month(self, tag: str) -> List[Shipment]:
        """Completed shipments whose completion falls in ``tag``, latest completion first."""

        try:
            start, end = month_window(tag)
        except InvalidFilter as error:
            LOGGER.warning("No completed shipments for invalid month: %s", error)
            return []
        where = and_(
            ShipmentRow.status == ShipmentStatus.COMPLETE.value,
            ShipmentRow.completed_at.is_not(None),
            ShipmentRow.completed_at.between(start, end),
        )
        return self._store.scan(where, order_by="completed_at").to_list()

    def completed(self) -> List[Shipment]:
        """Every completed shipment with a completion time, latest completion first."""

        where = and_(
            ShipmentRow.status == ShipmentStatus.COMPLETE.value,
            ShipmentRow.completed_at.is_not(None),
        )
        return self._store.scan(where, order_by="completed_at").to_list()
