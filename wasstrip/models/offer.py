# wasstrip/models/offer.py

"""Result models produced by the cheapest-offer resolver."""

from dataclasses import dataclass

from wasstrip.models.product import Product, ProductVariant


@dataclass(frozen=True)
class Offer:
    """One comparable offer: a variant, or a product's own price."""

    product: Product
    variant: ProductVariant | None
    price: float
    price_per_wash: float

    @property
    def is_product_level(self) -> bool:
        """True when the offer comes from the product's own price fields."""
        return self.variant is None

    @property
    def label(self) -> str:
        """Variant name, or the product name for product-level offers."""
        if self.variant is None:
            return self.product.name
        return self.variant.name


@dataclass(frozen=True)
class ComparisonResult:
    """Cheapest offer per product plus the overall cheapest offer."""

    per_product: dict[str, Offer]
    cheapest: Offer


@dataclass(frozen=True)
class ProductAwards:
    """Award flags shown next to a product in listings."""

    best_review: bool = False
    best_sustainability: bool = False
    best_deal_price: bool = False
    best_try_price: bool = False

    @property
    def has_any(self) -> bool:
        """True when at least one award is set."""
        return (
            self.best_review
            or self.best_sustainability
            or self.best_deal_price
            or self.best_try_price
        )
