"""Mini README: Exception taxonomy for the income tracker core.

Each error also derives from the builtin the surrounding code would
naturally catch (``KeyError`` for missing records, ``ValueError`` for bad
input, ``RuntimeError`` for storage faults) so callers can stay generic.
"""

from __future__ import annotations


class IncomeTrackerError(Exception):
    """Base class for all incometracker errors."""


class NotFound(IncomeTrackerError, KeyError):
    """Raised when a shipment id is not present in the record store."""

    def __init__(self, shipment_id: int) -> None:
        super().__init__(f"Shipment {shipment_id} not found")
        self.shipment_id = shipment_id

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0])


class InvalidPrice(IncomeTrackerError, ValueError):
    """Raised when a non-positive or non-numeric price reaches the catalog."""


class InvalidFilter(IncomeTrackerError, ValueError):
    """Raised for malformed ``MM-YYYY`` month tags."""


class StorageFailure(IncomeTrackerError, RuntimeError):
    """Raised when the underlying database rejects a read or write."""


__all__ = [
    "IncomeTrackerError",
    "InvalidFilter",
    "InvalidPrice",
    "NotFound",
    "StorageFailure",
]
