# wasstrip/pricing/resolver.py

"""Cheapest-offer resolution over a read-only catalog snapshot."""

import logging
import math
from collections.abc import Sequence

from wasstrip.models.offer import ComparisonResult, Offer
from wasstrip.models.product import Product, ProductVariant
from wasstrip.pricing.errors import EmptyInputError, InvalidVariantError

logger = logging.getLogger("wasstrip.resolver")


class CheapestOfferResolver:
    """Pick the cheapest offer per wash, per product and overall.

    Ties always go to the first offer encountered in input order: the
    per-product pick uses a stable sort, the global pick a strict
    less-than reduction.
    """

    @staticmethod
    def _variant_offer(
        product: Product, variant: ProductVariant,
    ) -> Offer:
        """Build an offer for *variant*, checking it belongs to *product*."""
        if variant.product_id != product.id:
            raise InvalidVariantError(
                f"variant {variant.id!r} is listed under product "
                f"{product.id!r} but owned by {variant.product_id!r}"
            )
        try:
            per_wash = variant.price_per_wash
        except InvalidVariantError as exc:
            raise InvalidVariantError(
                f"variant {variant.id!r} ({variant.name}) of "
                f"{product.name}: {exc}"
            ) from exc
        return Offer(
            product=product,
            variant=variant,
            price=variant.price,
            price_per_wash=per_wash,
        )

    @staticmethod
    def _product_offer(product: Product) -> Offer | None:
        """Offer from the product's own price fields, if it has them."""
        if not product.has_own_pricing:
            return None
        price = float(product.current_price or 0.0)
        per_wash = float(product.price_per_wash or 0.0)
        if not (math.isfinite(price) and math.isfinite(per_wash)):
            raise InvalidVariantError(
                f"product {product.id!r} ({product.name}) has a non-finite "
                f"price ({price}) or price per wash ({per_wash})"
            )
        if price < 0 or per_wash < 0:
            raise InvalidVariantError(
                f"product {product.id!r} ({product.name}) has a negative "
                f"price ({price}) or price per wash ({per_wash})"
            )
        return Offer(
            product=product,
            variant=None,
            price=price,
            price_per_wash=per_wash,
        )

    @staticmethod
    def cheapest_per_product(
        products: Sequence[Product],
    ) -> dict[str, Offer]:
        """Map each product id to its cheapest offer per wash.

        Products without variants fall back to their own price fields;
        products with neither are left out.

        Raises:
            EmptyInputError: *products* is empty, or no product has a
                comparable offer.
            InvalidVariantError: a variant cannot be priced per wash.
        """
        if not products:
            raise EmptyInputError("no products to compare")

        result: dict[str, Offer] = {}
        for product in products:
            if product.variants:
                offers = [
                    CheapestOfferResolver._variant_offer(product, v)
                    for v in product.variants
                ]
                # list.sort is stable: equal prices keep input order
                offers.sort(key=lambda o: o.price_per_wash)
                result[product.id] = offers[0]
                continue

            own = CheapestOfferResolver._product_offer(product)
            if own is None:
                logger.debug(
                    "Product %s has no variants and no own pricing",
                    product.name,
                )
                continue
            result[product.id] = own

        if not result:
            raise EmptyInputError(
                f"none of {len(products)} products has a comparable offer"
            )
        return result

    @staticmethod
    def global_cheapest(
        products: Sequence[Product],
        include_product_prices: bool = False,
    ) -> Offer:
        """Return the single cheapest offer per wash across all products.

        Only variants take part unless *include_product_prices* is set,
        in which case products without variants join with their own
        price fields.  When no product has any variant, the product-level
        prices are compared instead.

        Raises:
            EmptyInputError: *products* is empty, or no offer qualifies.
            InvalidVariantError: a variant or product-level price cannot
                be compared per wash.
        """
        if not products:
            raise EmptyInputError("no products to compare")

        has_variants = any(p.variants for p in products)
        with_own_prices = include_product_prices or not has_variants

        best: Offer | None = None
        for product in products:
            for variant in product.variants:
                # Owner comes from the variant's product_id, checked
                # against the product that lists it
                offer = CheapestOfferResolver._variant_offer(
                    product, variant,
                )
                if best is None or offer.price_per_wash < best.price_per_wash:
                    best = offer

            if with_own_prices and not product.variants:
                own = CheapestOfferResolver._product_offer(product)
                if own is not None and (
                    best is None
                    or own.price_per_wash < best.price_per_wash
                ):
                    best = own

        if best is None:
            raise EmptyInputError(
                f"none of {len(products)} products has a comparable offer"
            )
        if not has_variants and not include_product_prices:
            logger.debug(
                "No variants in %d products, compared product-level prices",
                len(products),
            )
        return best

    @staticmethod
    def resolve(
        products: Sequence[Product],
        include_product_prices: bool = False,
    ) -> ComparisonResult:
        """Compute per-product and global cheapest offers in one call."""
        per_product = CheapestOfferResolver.cheapest_per_product(products)
        cheapest = CheapestOfferResolver.global_cheapest(
            products, include_product_prices,
        )
        logger.info(
            "Cheapest of %d products: %s / %s at %.4f per wash",
            len(products),
            cheapest.product.name,
            cheapest.label,
            cheapest.price_per_wash,
        )
        return ComparisonResult(per_product=per_product, cheapest=cheapest)


def compare_offers(
    products: Sequence[Product],
    include_product_prices: bool = False,
) -> ComparisonResult:
    """Module-level shortcut for :meth:`CheapestOfferResolver.resolve`."""
    return CheapestOfferResolver.resolve(products, include_product_prices)
