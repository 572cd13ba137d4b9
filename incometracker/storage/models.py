"""Mini README: ORM rows backing the record store and the price catalog.

Structure:
    * ShipmentRow - one row per shipment, keyed by an autoincrement id.
    * PriceOverrideRow - persisted product price overrides (key-value).

Product and status are stored by enum name so the table stays readable
with any SQLite browser.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base, DecimalText, UTCDateTime


class ShipmentRow(Base):
    """Persisted shipment record."""

    __tablename__ = "shipments"
    __table_args__ = (
        Index("ix_shipments_status_completed_at", "status", "completed_at"),
        # AUTOINCREMENT keeps ids monotonic even after deletes.
        {"sqlite_autoincrement": True},
    )

    shipment_id: Mapped[int] = mapped_column("id", Integer, primary_key=True, autoincrement=True)
    product: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    destination: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    unit_price: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    returned_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<ShipmentRow {self.shipment_id} {self.product} x{self.quantity} {self.status}>"


class PriceOverrideRow(Base):
    """Current unit price chosen for a product."""

    __tablename__ = "product_prices"

    product: Mapped[str] = mapped_column(String(64), primary_key=True)
    price: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
