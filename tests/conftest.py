"""Mini README: Shared fixtures for the income tracker test suite.

Every test gets a fresh in-memory SQLite database, a record store, a price
catalog loaded with defaults and a ledger service driven by ``FakeClock`` so
creation and completion instants are deterministic.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest

from incometracker.catalog import PriceCatalog
from incometracker.domain import Product, Shipment, ShipmentStatus
from incometracker.ledger import LedgerService
from incometracker.storage import RecordStore, create_database_engine, create_session_factory, init_schema


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, moment: datetime) -> datetime:
        self.now = moment
        return moment

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


def utc(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_database_engine("sqlite://")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory) -> RecordStore:
    return RecordStore(session_factory)


@pytest.fixture
def catalog(session_factory) -> PriceCatalog:
    catalog = PriceCatalog(session_factory)
    catalog.load_defaults()
    return catalog


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc(2024, 3, 10))


@pytest.fixture
def ledger(store, catalog, clock) -> LedgerService:
    return LedgerService(store, catalog, clock=clock)


@pytest.fixture
def make_shipment() -> Callable[..., Shipment]:
    """Build unsaved shipments with sensible defaults."""

    def _make(**overrides: object) -> Shipment:
        values = {
            "shipment_id": None,
            "product": Product.FISH_SKIN_ORIGINAL,
            "quantity": 4,
            "destination": "Warehouse",
            "created_at": utc(2024, 1, 1),
            "unit_price": Decimal("100"),
            "status": ShipmentStatus.IN_PROGRESS,
            "returned_quantity": 0,
            "completed_at": None,
        }
        values.update(overrides)
        return Shipment(**values)

    return _make


@pytest.fixture
def populated_ledger(ledger: LedgerService, clock: FakeClock):
    """Four shipments spread over January to April 2024.

    Returns the ledger and the shipments keyed A-D:
        A  salted egg x10, created 15 Jan, in progress      (500000)
        B  original x5,    created 10 Feb, in progress      (225000)
        C  salted egg x3,  created 20 Feb, completed 25 Feb (150000)
        D  plastic x7,     created 05 Mar, completed 02 Apr (280000)
    """

    clock.set(utc(2024, 1, 15))
    a = ledger.add_shipment(Product.FISH_SKIN_SALTED_EGG, 10, "Store A")
    clock.set(utc(2024, 2, 10))
    b = ledger.add_shipment(Product.FISH_SKIN_ORIGINAL, 5, "Store B")
    clock.set(utc(2024, 2, 20))
    c = ledger.add_shipment(Product.FISH_SKIN_SALTED_EGG, 3, "Store C")
    clock.set(utc(2024, 2, 25))
    c = ledger.complete_shipment(c.shipment_id, 0)
    clock.set(utc(2024, 3, 5))
    d = ledger.add_shipment(Product.FISH_SKIN_ORIGINAL_PLASTIC, 7, "Store D")
    clock.set(utc(2024, 4, 2))
    d = ledger.complete_shipment(d.shipment_id, 0)
    return ledger, {"A": a, "B": b, "C": c, "D": d}
