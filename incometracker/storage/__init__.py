"""Mini README: SQL persistence for shipments and price overrides.

``database`` builds engines and sessions, ``models`` declares the tables and
``record_store`` exposes the shipment record store used by the ledger.
"""

from .database import Base, create_database_engine, create_session_factory, init_schema
from .models import PriceOverrideRow, ShipmentRow
from .record_store import RecordStore, ShipmentScan

__all__ = [
    "Base",
    "PriceOverrideRow",
    "RecordStore",
    "ShipmentRow",
    "ShipmentScan",
    "create_database_engine",
    "create_session_factory",
    "init_schema",
]
