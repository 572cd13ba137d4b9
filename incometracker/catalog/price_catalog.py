"""Mini README: Current unit prices with persisted overrides.

Structure:
    * coerce_price - validate and normalise a submitted price.
    * PriceCatalog - product -> price mapping backed by ``product_prices``.

The catalog is an explicit component injected into the ledger service.
Changing a price only affects shipments recorded (or re-priced) afterwards;
stored shipments keep the unit price captured at the time.
"""

from __future__ import annotations

import threading
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..domain import Product
from ..errors import InvalidPrice, StorageFailure
from ..logging_utils import get_logger
from ..storage.models import PriceOverrideRow

LOGGER = get_logger(__name__)

PriceLike = Union[Decimal, int, float, str]
PriceListener = Callable[[Product, Decimal], None]


def coerce_price(value: PriceLike) -> Decimal:
    """Return ``value`` as a positive finite ``Decimal`` or raise ``InvalidPrice``."""

    if isinstance(value, bool):
        raise InvalidPrice(f"Price must be a number, got {value!r}")
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as error:
        raise InvalidPrice(f"Price must be a number, got {value!r}") from error
    if not price.is_finite() or price <= 0:
        raise InvalidPrice(f"Price must be greater than zero, got {value!r}")
    return price


def _coerce_product(product: Union[Product, str]) -> Product:
    return product if isinstance(product, Product) else Product.from_str(product)


class PriceCatalog:
    """Mapping from product to current unit price."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._prices: Dict[Product, Decimal] = {product: product.default_price for product in Product}
        self._listeners: List[PriceListener] = []

    def load_defaults(self) -> Dict[Product, Decimal]:
        """Load persisted overrides; products without one use their default."""

        try:
            with self._session_factory() as session:
                rows = session.execute(select(PriceOverrideRow)).scalars().all()
                overrides = {row.product: row.price for row in rows}
        except SQLAlchemyError as error:
            LOGGER.error("Could not load price overrides: %s", error)
            raise StorageFailure(f"Failed to load price overrides: {error}") from error

        loaded: Dict[Product, Decimal] = {}
        for product in Product:
            stored = overrides.get(product.value)
            if stored is not None and stored > 0:
                loaded[product] = stored
            else:
                if stored is not None:
                    LOGGER.warning("Ignoring non-positive stored price %s for %s", stored, product.value)
                loaded[product] = product.default_price
        unknown = set(overrides) - {product.value for product in Product}
        if unknown:
            LOGGER.warning("Ignoring price overrides for unknown products: %s", sorted(unknown))

        with self._lock:
            self._prices = loaded
        LOGGER.debug("Price catalog loaded with %s overrides", len(overrides) - len(unknown))
        return dict(loaded)

    def get(self, product: Union[Product, str]) -> Decimal:
        return self._prices[_coerce_product(product)]

    def prices(self) -> Dict[Product, Decimal]:
        """Return a copy of the current mapping."""

        return dict(self._prices)

    def set(self, product: Union[Product, str], price: PriceLike) -> Decimal:
        """Persist a new price for ``product`` and make it current.

        Raises:
            InvalidPrice: when ``price`` is not a positive number.
            StorageFailure: when the override cannot be written; the previous
                price stays current.
        """

        resolved = _coerce_product(product)
        new_price = coerce_price(price)
        with self._lock:
            self._write_overrides({resolved: new_price})
            previous = self._prices.get(resolved)
            self._prices = {**self._prices, resolved: new_price}
        LOGGER.info("Price for %s changed from %s to %s", resolved.value, previous, new_price)
        self._notify(resolved, new_price)
        return new_price

    def save(self) -> None:
        """Persist every current price as an override."""

        with self._lock:
            self._write_overrides(dict(self._prices))
        LOGGER.info("Saved %s product prices", len(self._prices))

    def reset(self, product: Union[Product, str]) -> Decimal:
        """Drop the override for ``product`` and fall back to its default price."""

        resolved = _coerce_product(product)
        with self._lock:
            try:
                with self._session_factory.begin() as session:
                    session.execute(
                        delete(PriceOverrideRow).where(PriceOverrideRow.product == resolved.value)
                    )
            except SQLAlchemyError as error:
                LOGGER.error("Could not reset price for %s: %s", resolved.value, error)
                raise StorageFailure(f"Failed to reset price for {resolved.value}: {error}") from error
            self._prices = {**self._prices, resolved: resolved.default_price}
        LOGGER.info("Price for %s reset to default %s", resolved.value, resolved.default_price)
        self._notify(resolved, resolved.default_price)
        return resolved.default_price

    def subscribe(self, listener: PriceListener) -> None:
        """Register a callback run after every price change."""

        self._listeners.append(listener)

    def unsubscribe(self, listener: PriceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _write_overrides(self, prices: Dict[Product, Decimal]) -> None:
        try:
            with self._session_factory.begin() as session:
                for product, price in prices.items():
                    session.merge(PriceOverrideRow(product=product.value, price=price))
        except SQLAlchemyError as error:
            LOGGER.error("Could not persist prices for %s: %s", sorted(p.value for p in prices), error)
            raise StorageFailure(f"Failed to persist prices: {error}") from error

    def _notify(self, product: Product, price: Decimal) -> None:
        for listener in list(self._listeners):
            try:
                listener(product, price)
            except Exception:
                LOGGER.exception("Price listener %r failed for %s", listener, product.value)
