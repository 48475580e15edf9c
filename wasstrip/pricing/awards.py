# wasstrip/pricing/awards.py

"""Award badges: best review, sustainability, deal and try-out price."""

import logging
from collections.abc import Sequence

from wasstrip.config.settings import Settings
from wasstrip.models.offer import ProductAwards
from wasstrip.models.product import Product

logger = logging.getLogger("wasstrip.awards")


class AwardCalculator:
    """Flag the products that win each comparison category.

    Several products can share an award when they tie on the winning
    value.  Variants with unusable data (no washes, no price) are skipped
    rather than raised; awards decorate listings and must not fail them.

    A variant without a wash count is not a try-out pack here.  The web
    app counted it as one, but its size is unknown, so it could just as
    well be a bulk pack.
    """

    @staticmethod
    def _deal_prices(product: Product) -> list[float]:
        """Positive per-wash prices of a product (variants first)."""
        if product.variants:
            return [
                v.price_per_wash
                for v in product.variants
                if v.wash_count > 0 and v.price > 0
            ]
        if product.price_per_wash and product.price_per_wash > 0:
            return [product.price_per_wash]
        return []

    @staticmethod
    def _try_prices(product: Product) -> list[float]:
        """Absolute prices of the product's small (try-out) packs."""
        limit = Settings.SMALL_PACK_MAX_WASHES
        return [
            v.price
            for v in product.variants
            if v.price > 0 and 0 < v.wash_count <= limit
        ]

    @staticmethod
    def calculate(
        products: Sequence[Product],
    ) -> dict[str, ProductAwards]:
        """Return the award flags for every product, keyed by product id."""
        if not products:
            return {}

        ratings = [p.rating for p in products if p.rating is not None]
        best_rating = max(ratings) if ratings else 0.0

        scores = [
            p.sustainability
            for p in products
            if p.sustainability is not None
        ]
        best_sustainability = max(scores) if scores else 0.0

        deal_by_product = {
            p.id: AwardCalculator._deal_prices(p) for p in products
        }
        try_by_product = {
            p.id: AwardCalculator._try_prices(p) for p in products
        }
        all_deals = [x for xs in deal_by_product.values() for x in xs]
        all_tries = [x for xs in try_by_product.values() for x in xs]
        best_deal = min(all_deals) if all_deals else None
        best_try = min(all_tries) if all_tries else None

        logger.debug(
            "Award thresholds: rating=%s sustainability=%s "
            "deal=%s try=%s",
            best_rating,
            best_sustainability,
            best_deal,
            best_try,
        )

        awards: dict[str, ProductAwards] = {}
        for product in products:
            deals = deal_by_product[product.id]
            tries = try_by_product[product.id]
            awards[product.id] = ProductAwards(
                best_review=(
                    best_rating > 0 and product.rating == best_rating
                ),
                best_sustainability=(
                    best_sustainability > 0
                    and product.sustainability == best_sustainability
                ),
                best_deal_price=(
                    best_deal is not None
                    and bool(deals)
                    and min(deals) == best_deal
                ),
                best_try_price=(
                    best_try is not None
                    and bool(tries)
                    and min(tries) == best_try
                ),
            )
        return awards
