"""Mini README: Ledger service owning the shipment lifecycle.

Structure:
    * validate_shipment_input - caller-side checks to run before mutating calls.
    * LedgerService - add/update/complete/delete shipments and query reports.

Lifecycle:
    ``add_shipment`` records a shipment IN_PROGRESS at today's catalog price.
    ``update_shipment`` is the general edit: it re-prices to the current
    catalog price, keeps ``created_at`` and only touches ``completed_at`` on a
    status transition (set on IN_PROGRESS -> COMPLETE, cleared on the way
    back, kept otherwise). ``complete_shipment`` always stamps a fresh
    ``completed_at``, even for shipments that were already complete.

The service trusts its callers' preconditions; run
``validate_shipment_input`` first when the values come from a form.
Listeners registered with ``subscribe`` are called after each committed
mutation with the event kind and shipment id.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Union

from ..catalog import PriceCatalog
from ..domain import LedgerEvent, MonthlyIncome, Product, Shipment, ShipmentStatus, format_month_tag
from ..errors import NotFound
from ..logging_utils import get_logger
from ..storage import RecordStore
from .aggregation import AggregationEngine
from .filters import FilterEngine, ShipmentFilter

LOGGER = get_logger(__name__)

Clock = Callable[[], datetime]
LedgerListener = Callable[[LedgerEvent, int], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_shipment_input(quantity: int, destination: str, returned_quantity: int = 0) -> None:
    """Raise ``ValueError`` describing the first violated precondition."""

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError("Quantity must be a whole number greater than zero.")
    if not isinstance(destination, str) or not destination.strip():
        raise ValueError("Destination must not be empty.")
    if isinstance(returned_quantity, bool) or not isinstance(returned_quantity, int):
        raise ValueError("Returned quantity must be a whole number.")
    if returned_quantity < 0:
        raise ValueError("Returned quantity cannot be negative.")
    if returned_quantity > quantity:
        raise ValueError(
            f"Returned quantity ({returned_quantity}) cannot exceed shipped quantity ({quantity})."
        )


class LedgerService:
    """Sole mutator of shipment records and entry point for ledger queries."""

    def __init__(
        self,
        store: RecordStore,
        catalog: PriceCatalog,
        *,
        filters: Optional[FilterEngine] = None,
        aggregation: Optional[AggregationEngine] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._filters = filters or FilterEngine(store)
        self._aggregation = aggregation or AggregationEngine(self._filters)
        self._clock = clock or _utc_now
        self._listeners: List[LedgerListener] = []

    @property
    def catalog(self) -> PriceCatalog:
        return self._catalog

    @property
    def aggregation(self) -> AggregationEngine:
        return self._aggregation

    # Mutations -----------------------------------------------------------

    def add_shipment(self, product: Product, quantity: int, destination: str) -> Shipment:
        """Record a new IN_PROGRESS shipment priced at the current catalog price."""

        product = Product(product)
        shipment = Shipment(
            shipment_id=None,
            product=product,
            quantity=quantity,
            destination=destination,
            created_at=self._clock(),
            unit_price=self._catalog.get(product),
            status=ShipmentStatus.IN_PROGRESS,
            returned_quantity=0,
            completed_at=None,
        )
        shipment_id = self._store.insert(shipment)
        LOGGER.info(
            "Added shipment %s: %s x%s to %s at %s",
            shipment_id,
            product.value,
            quantity,
            destination,
            shipment.unit_price,
        )
        self._notify(LedgerEvent.ADDED, shipment_id)
        return replace(shipment, shipment_id=shipment_id)

    def update_shipment(
        self,
        shipment_id: int,
        product: Product,
        quantity: int,
        destination: str,
        status: ShipmentStatus,
        returned_quantity: int = 0,
    ) -> Shipment:
        """Edit a shipment, re-pricing it at today's catalog price.

        Raises:
            NotFound: when ``shipment_id`` is unknown.
        """

        product = Product(product)
        status = ShipmentStatus(status)

        def _changes(current: Shipment) -> Dict[str, object]:
            if current.status is ShipmentStatus.IN_PROGRESS and status is ShipmentStatus.COMPLETE:
                completed_at: Optional[datetime] = self._clock()
            elif current.status is ShipmentStatus.COMPLETE and status is ShipmentStatus.IN_PROGRESS:
                completed_at = None
            else:
                completed_at = current.completed_at
            return {
                "product": product,
                "quantity": quantity,
                "destination": destination,
                "unit_price": self._catalog.get(product),
                "status": status,
                "returned_quantity": returned_quantity,
                "completed_at": completed_at,
            }

        # Read, transition and write happen under one writer lock.
        original, updated = self._store.modify(shipment_id, _changes)
        LOGGER.info(
            "Updated shipment %s: status %s -> %s, unit price %s -> %s",
            shipment_id,
            original.status.value,
            status.value,
            original.unit_price,
            updated.unit_price,
        )
        self._notify(LedgerEvent.UPDATED, shipment_id)
        return updated

    def complete_shipment(self, shipment_id: int, returned_quantity: int) -> Shipment:
        """Mark a shipment complete now, recording how many units came back.

        Raises:
            NotFound: when ``shipment_id`` is unknown.
        """

        updated = self._store.update(
            shipment_id,
            status=ShipmentStatus.COMPLETE,
            returned_quantity=returned_quantity,
            completed_at=self._clock(),
        )
        LOGGER.info(
            "Completed shipment %s with %s returned (value %s)",
            shipment_id,
            returned_quantity,
            updated.total_value,
        )
        self._notify(LedgerEvent.COMPLETED, shipment_id)
        return updated

    def delete_shipment(self, shipment_id: int) -> None:
        """Remove a shipment; deleting an unknown id does nothing."""

        if self._store.delete(shipment_id):
            LOGGER.info("Deleted shipment %s", shipment_id)
            self._notify(LedgerEvent.DELETED, shipment_id)

    # Lookups and queries -------------------------------------------------

    def get_shipment(self, shipment_id: int) -> Optional[Shipment]:
        return self._store.get(shipment_id)

    def require_shipment(self, shipment_id: int) -> Shipment:
        """Return the shipment or raise ``NotFound`` (used when opening it for editing)."""

        shipment = self._store.get(shipment_id)
        if shipment is None:
            raise NotFound(shipment_id)
        return shipment

    def list_shipments(self) -> List[Shipment]:
        """All shipments, newest first."""

        return self._store.scan().to_list()

    def list_by_status(self, status: ShipmentStatus) -> List[Shipment]:
        return self.query(ShipmentFilter(status=status))

    def query(self, criteria: Optional[ShipmentFilter] = None) -> List[Shipment]:
        return self._filters.apply(criteria or ShipmentFilter())

    def filter_by_completion_month(self, year: int, month: int) -> List[Shipment]:
        """Completed shipments whose completion falls in the given month."""

        return self._aggregation.completed_shipments_by_month(format_month_tag(year, month))

    # Totals --------------------------------------------------------------

    def total_value(self) -> Decimal:
        return self._aggregation.total_value(self.list_shipments())

    def in_progress_value(self) -> Decimal:
        return self._aggregation.total_value(self.list_by_status(ShipmentStatus.IN_PROGRESS))

    def completed_value(self) -> Decimal:
        return self._aggregation.total_value(self.list_by_status(ShipmentStatus.COMPLETE))

    def total_value_by_product(self, product: Product) -> Decimal:
        return self._aggregation.total_value(self.query(ShipmentFilter(product=product)))

    def total_quantity_by_product(self, product: Product) -> int:
        return self._aggregation.total_quantity(self.query(ShipmentFilter(product=product)))

    def total_value_by_date_range(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> Decimal:
        return self._aggregation.total_value(self.query(ShipmentFilter(date_start=start, date_end=end)))

    def filtered_total_value(self, criteria: ShipmentFilter) -> Decimal:
        return self._aggregation.total_value(self.query(criteria))

    def available_completion_months(self) -> List[str]:
        return self._aggregation.available_completion_months()

    def completed_value_by_month(self, tag: str) -> Decimal:
        return self._aggregation.completed_value_by_month(tag)

    def completed_shipments_by_month(self, tag: str) -> List[Shipment]:
        return self._aggregation.completed_shipments_by_month(tag)

    def monthly_income(self) -> List[MonthlyIncome]:
        return self._aggregation.monthly_income()

    def export_snapshot(self) -> Dict[str, List[Dict[str, object]]]:
        """Export shipments grouped by status for JSON responses."""

        in_progress: List[Dict[str, object]] = []
        complete: List[Dict[str, object]] = []
        for shipment in self.list_shipments():
            if shipment.status is ShipmentStatus.COMPLETE:
                complete.append(shipment.as_dict())
            else:
                in_progress.append(shipment.as_dict())
        return {"in_progress": in_progress, "complete": complete}

    # Change notification -------------------------------------------------

    def subscribe(self, listener: LedgerListener) -> None:
        """Register a callback run after every committed mutation."""

        self._listeners.append(listener)

    def unsubscribe(self, listener: LedgerListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: LedgerEvent, shipment_id: int) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, shipment_id)
            except Exception:
                LOGGER.exception("Ledger listener %r failed for %s of %s", listener, event.value, shipment_id)
