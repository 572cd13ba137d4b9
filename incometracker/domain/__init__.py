"""Mini README: Plain domain values shared by storage, catalog and ledger.

This package has no persistence or framework imports so every other layer
can depend on it. ``products`` holds the fixed product set, ``shipments``
the shipment record and report rows, and ``months`` the ``MM-YYYY`` month
tag helpers used for monthly income reports.
"""

from .months import as_utc, format_month_tag, month_tag, month_window, parse_month_tag
from .products import Product
from .shipments import LedgerEvent, MonthlyIncome, Shipment, ShipmentStatus

__all__ = [
    "LedgerEvent",
    "MonthlyIncome",
    "Product",
    "Shipment",
    "ShipmentStatus",
    "as_utc",
    "format_month_tag",
    "month_tag",
    "month_window",
    "parse_month_tag",
]
