# wasstrip/services/comparison_service.py

"""Loads a catalog snapshot and runs the price comparison over it."""

import logging
from dataclasses import dataclass, field

from wasstrip.filters.offer_validator import OfferValidator
from wasstrip.models.offer import ComparisonResult, ProductAwards
from wasstrip.models.product import Product
from wasstrip.pricing.awards import AwardCalculator
from wasstrip.pricing.resolver import CheapestOfferResolver
from wasstrip.storage.offer_repository import OfferRepository

logger = logging.getLogger("wasstrip.service")


@dataclass
class ComparisonReport:
    """Container for one completed comparison run."""

    products: list[Product]
    result: ComparisonResult
    awards: dict[str, ProductAwards] = field(default_factory=dict)
    skipped_count: int = 0
    supplier: str | None = None


class ComparisonService:
    """Coordinates snapshot loading, validation, resolution and awards."""

    def __init__(
        self, repository: OfferRepository | None = None,
    ) -> None:
        self.repository = repository or OfferRepository()

    def close(self) -> None:
        """Close the underlying repository."""
        self.repository.close()

    def run(
        self,
        supplier: str | None = None,
        include_product_prices: bool = False,
        skip_invalid: bool = False,
    ) -> ComparisonReport:
        """Compare all offers in the catalog (or one supplier's).

        With *skip_invalid* malformed variants are dropped before the
        resolver sees them; otherwise the resolver's
        ``InvalidVariantError`` propagates to the caller, as does
        ``EmptyInputError`` for an empty catalog.
        """
        products = self.repository.load_snapshot(supplier=supplier)
        skipped = 0
        if skip_invalid:
            products, skipped = OfferValidator.validate(products)

        result = CheapestOfferResolver.resolve(
            products, include_product_prices,
        )
        awards = AwardCalculator.calculate(products)

        logger.info(
            "Comparison over %d products (%d skipped), cheapest: %s",
            len(products),
            skipped,
            result.cheapest.product.name,
        )
        return ComparisonReport(
            products=products,
            result=result,
            awards=awards,
            skipped_count=skipped,
            supplier=supplier,
        )
