"""Mini README: Shipment ledger queries, rollups and lifecycle rules.

``filters`` builds composite predicates over the record store,
``aggregation`` turns filtered subsets into totals and monthly income, and
``service`` is the single entry point the presentation layer talks to.
"""

from .aggregation import AggregationEngine
from .filters import FilterEngine, ShipmentFilter
from .service import LedgerService, validate_shipment_input

__all__ = [
    "AggregationEngine",
    "FilterEngine",
    "LedgerService",
    "ShipmentFilter",
    "validate_shipment_input",
]
