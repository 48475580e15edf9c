# wasstrip/storage/file_manager.py

"""Handles saving comparison reports to disk."""

import csv
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from wasstrip.config.settings import Settings
from wasstrip.models.offer import Offer, ProductAwards
from wasstrip.services.comparison_service import ComparisonReport

logger = logging.getLogger("wasstrip.storage")


def offer_to_dict(offer: Offer) -> dict[str, object]:
    """Serialise an offer to a plain dict for JSON output."""
    return {
        "product_id": offer.product.id,
        "product": offer.product.name,
        "supplier": offer.product.supplier,
        "variant_id": offer.variant.id if offer.variant else None,
        "variant": offer.label,
        "price": offer.price,
        "price_per_wash": round(
            offer.price_per_wash, Settings.PRICE_PER_WASH_DECIMALS,
        ),
        "currency": offer.product.currency,
    }


def award_names(awards: ProductAwards | None) -> list[str]:
    """Names of the awards that are set, e.g. ``['best_deal_price']``."""
    if awards is None:
        return []
    return [name for name, flag in asdict(awards).items() if flag]


def report_to_dict(report: ComparisonReport) -> dict[str, object]:
    """Serialise a full comparison report."""
    products: list[dict[str, object]] = []
    for product_id, offer in report.result.per_product.items():
        entry = offer_to_dict(offer)
        entry["awards"] = award_names(report.awards.get(product_id))
        products.append(entry)
    return {
        "supplier": report.supplier,
        "skipped": report.skipped_count,
        "cheapest": offer_to_dict(report.result.cheapest),
        "products": products,
    }


class FileManager:
    """Handles saving comparison reports to disk."""

    def __init__(self) -> None:
        self.results_dir: Path = Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, results_dir=%s", self.results_dir)

    def save_report(self, report: ComparisonReport) -> Path:
        """Save a comparison report to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"comparison_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(report_to_dict(report), f, ensure_ascii=False, indent=2)

        logger.info(
            "Saved comparison of %d products to %s",
            len(report.result.per_product),
            filepath,
        )
        return filepath

    def export_csv(self, report: ComparisonReport) -> Path:
        """Export every offer in the snapshot to CSV, cheapest per wash first."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"export_offers_{timestamp}.csv"

        rows: list[tuple[str, str, str, int, float, float]] = []
        for product in report.products:
            for v in product.variants:
                rows.append((
                    product.name,
                    product.supplier,
                    v.name,
                    v.wash_count,
                    v.price,
                    v.price_per_wash,
                ))
            if not product.variants and product.has_own_pricing:
                rows.append((
                    product.name,
                    product.supplier,
                    "",
                    product.washes_per_pack,
                    float(product.current_price or 0.0),
                    float(product.price_per_wash or 0.0),
                ))
        rows.sort(key=lambda r: r[5])

        decimals = Settings.PRICE_PER_WASH_DECIMALS
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["Product", "Supplier", "Variant", "Washes",
                 "Price", "PricePerWash"]
            )
            for name, supplier, variant, washes, price, per_wash in rows:
                writer.writerow(
                    [name, supplier, variant, washes,
                     price, round(per_wash, decimals)]
                )

        logger.info(
            "Exported %d offers to %s",
            len(rows),
            filepath,
        )
        return filepath
