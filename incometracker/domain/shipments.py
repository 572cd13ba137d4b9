"""Mini README: Shipment records and report rows handed to callers.

Structure:
    * ShipmentStatus - lifecycle states with display names.
    * Shipment - immutable copy of a stored shipment plus derived values.
    * MonthlyIncome - completed income for one ``MM-YYYY`` month.
    * LedgerEvent - mutation kinds announced to change listeners.

Records returned from the ledger are copies; editing one never touches the
store. Use ``dataclasses.replace`` to build a modified copy.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from ..errors import InvalidFilter
from .months import parse_month_tag
from .products import Product


class ShipmentStatus(str, Enum):
    """Lifecycle of a shipment: payment is received on completion."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"

    @property
    def display_name(self) -> str:
        return "In Progress" if self is ShipmentStatus.IN_PROGRESS else "Complete"

    @classmethod
    def from_str(cls, value: str) -> "ShipmentStatus":
        """Coerce arbitrary casing and spacing into a valid status."""

        try:
            normalised = value.strip().upper().replace(" ", "_")
            return cls(normalised)
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported shipment status: {value}") from error


class LedgerEvent(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    COMPLETED = "completed"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class Shipment:
    """A shipment together with the unit price captured when it was recorded.

    ``shipment_id`` is ``None`` only for records that have not been inserted
    yet. ``unit_price`` is the business value at the time of the transaction
    and does not follow later catalog changes.
    """

    shipment_id: Optional[int]
    product: Product
    quantity: int
    destination: str
    created_at: datetime
    unit_price: Decimal
    status: ShipmentStatus = ShipmentStatus.IN_PROGRESS
    returned_quantity: int = 0
    completed_at: Optional[datetime] = None

    @property
    def effective_quantity(self) -> int:
        """Quantity kept by the customer after returns."""

        return self.quantity - self.returned_quantity

    @property
    def total_value(self) -> Decimal:
        return self.effective_quantity * self.unit_price

    @property
    def is_complete(self) -> bool:
        return self.status is ShipmentStatus.COMPLETE

    def as_dict(self) -> Dict[str, object]:
        """Export the shipment with serialisable values."""

        return {
            "shipment_id": self.shipment_id,
            "product": self.product.value,
            "product_name": self.product.display_name,
            "quantity": self.quantity,
            "returned_quantity": self.returned_quantity,
            "effective_quantity": self.effective_quantity,
            "destination": self.destination,
            "created_at": self.created_at.isoformat(),
            "unit_price": str(self.unit_price),
            "total_value": str(self.total_value),
            "status": self.status.value,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True, slots=True)
class MonthlyIncome:
    """Completed income attributed to a single completion month."""

    month: str
    total_value: Decimal

    @property
    def formatted_month(self) -> str:
        """Human readable label such as ``"March 2024"``.

        Tags that cannot be parsed at all are returned unchanged; a
        well-formed tag with an impossible month becomes ``"Unknown <year>"``.
        """

        try:
            year, month = parse_month_tag(self.month)
        except InvalidFilter:
            parts = self.month.split("-")
            if len(parts) == 2 and parts[0].isdigit() and parts[1].isdigit():
                return f"Unknown {parts[1]}"
            return self.month
        return f"{calendar.month_name[month]} {year}"
