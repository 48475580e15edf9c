# wasstrip/models/product.py

"""Catalog data models: products and their purchasable variants."""

from dataclasses import dataclass

from wasstrip.pricing.normalizer import compute_price_per_wash


@dataclass(frozen=True)
class ProductVariant:
    """A purchasable pack (price / wash count combination) of a product."""

    id: str
    product_id: str
    name: str
    price: float
    wash_count: int
    currency: str = "EUR"
    in_stock: bool = True
    is_default: bool = False
    url: str = ""

    @property
    def price_per_wash(self) -> float:
        """Absolute price divided by the number of washes in the pack."""
        return compute_price_per_wash(self.price, self.wash_count)


@dataclass(frozen=True)
class Product:
    """A retailer-level product as listed on the comparison site."""

    id: str
    name: str
    supplier: str
    current_price: float | None = None
    price_per_wash: float | None = None
    display_order: int = 0
    slug: str = ""
    washes_per_pack: int = 60
    currency: str = "EUR"
    in_stock: bool = True
    rating: float | None = None
    review_count: int = 0
    sustainability: float | None = None
    url: str = ""
    variants: tuple[ProductVariant, ...] = ()

    @property
    def has_own_pricing(self) -> bool:
        """True when the product carries its own price and per-wash price."""
        return (
            self.current_price is not None
            and self.price_per_wash is not None
        )


@dataclass
class VariantData:
    """An unsaved variant as handed over by a scrape or an admin edit."""

    name: str
    price: float
    wash_count: int
    currency: str = "EUR"
    in_stock: bool = True
    is_default: bool = False
    url: str = ""
