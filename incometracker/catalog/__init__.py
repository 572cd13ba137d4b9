"""Mini README: Product pricing for the income tracker.

The ``PriceCatalog`` keeps the current unit price of every product, persists
operator overrides and falls back to the built-in defaults declared on
``Product``. Ledger services receive a catalog instance rather than reaching
for global state.
"""

from ..domain import Product
from .price_catalog import PriceCatalog, coerce_price

__all__ = ["PriceCatalog", "Product", "coerce_price"]
