# wasstrip/filters/offer_validator.py

"""Offer validation: drop malformed variants before resolution."""

import dataclasses
import logging
import math

from wasstrip.models.product import Product, ProductVariant
from wasstrip.pricing.errors import InvalidVariantError
from wasstrip.pricing.normalizer import compute_price_per_wash

logger = logging.getLogger("wasstrip.filters")


def _own_pricing_valid(product: Product) -> bool:
    """True when the product's own price fields are finite and >= 0."""
    if not product.has_own_pricing:
        return False
    values = (product.current_price or 0.0, product.price_per_wash or 0.0)
    return all(math.isfinite(v) and v >= 0 for v in values)


class OfferValidator:
    """Strip variants that cannot be priced per wash.

    The resolver raises on bad data; callers that prefer to carry on with
    the valid part of a snapshot run it through here first.
    """

    @staticmethod
    def validate(
        products: list[Product],
    ) -> tuple[list[Product], int]:
        """Drop invalid variants and products left without any offer.

        A variant is invalid when its wash count is not positive, its
        price is negative, or it points at another product.  Returns the
        cleaned products and the number of dropped variants and products.
        """
        valid: list[Product] = []
        dropped = 0

        for product in products:
            kept: list[ProductVariant] = []
            for variant in product.variants:
                if variant.product_id != product.id:
                    logger.debug(
                        "Dropped variant %s listed under %s "
                        "(owned by %s)",
                        variant.name,
                        product.name,
                        variant.product_id,
                    )
                    dropped += 1
                    continue
                try:
                    compute_price_per_wash(variant.price, variant.wash_count)
                except InvalidVariantError as exc:
                    logger.debug(
                        "Dropped variant %s of %s: %s",
                        variant.name,
                        product.name,
                        exc,
                    )
                    dropped += 1
                    continue
                kept.append(variant)

            if len(kept) != len(product.variants):
                product = dataclasses.replace(
                    product, variants=tuple(kept),
                )

            if not product.variants and not _own_pricing_valid(product):
                logger.debug(
                    "Dropped product %s: no comparable offer",
                    product.name,
                )
                dropped += 1
                continue
            valid.append(product)

        if dropped:
            logger.info(
                "Validation dropped %d invalid entries",
                dropped,
            )

        return valid, dropped
