"""Mini README: The fixed product set sold by the business.

Structure:
    * Product - enum of catalog products with display names and default prices.

Members carry no mutable state. Current prices are owned by
``PriceCatalog``; ``default_price`` is only the built-in fallback used when
no override has been persisted.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict


class Product(str, Enum):
    """Enumerate the products that can be shipped."""

    FISH_SKIN_SALTED_EGG = "FISH_SKIN_SALTED_EGG"
    FISH_SKIN_ORIGINAL = "FISH_SKIN_ORIGINAL"
    FISH_SKIN_ORIGINAL_PLASTIC = "FISH_SKIN_ORIGINAL_PLASTIC"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def default_price(self) -> Decimal:
        return _DEFAULT_PRICES[self]

    @classmethod
    def from_str(cls, value: str) -> "Product":
        """Resolve a member from its name or display name, ignoring case."""

        try:
            normalised = value.strip().upper().replace(" ", "_")
            return cls(normalised)
        except (ValueError, AttributeError):
            pass
        for product in cls:
            if isinstance(value, str) and product.display_name.lower() == value.strip().lower():
                return product
        raise ValueError(f"Unsupported product: {value}")


_DISPLAY_NAMES: Dict[Product, str] = {
    Product.FISH_SKIN_SALTED_EGG: "Fish Skin Salted Egg",
    Product.FISH_SKIN_ORIGINAL: "Fish Skin Original",
    Product.FISH_SKIN_ORIGINAL_PLASTIC: "Fish Skin Original (Plastic)",
}

_DEFAULT_PRICES: Dict[Product, Decimal] = {
    Product.FISH_SKIN_SALTED_EGG: Decimal("50000"),
    Product.FISH_SKIN_ORIGINAL: Decimal("45000"),
    Product.FISH_SKIN_ORIGINAL_PLASTIC: Decimal("40000"),
}
