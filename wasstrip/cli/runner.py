# wasstrip/cli/runner.py

"""Headless CLI commands: price check, seeding and awards."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from wasstrip.config.settings import Settings
from wasstrip.models.offer import Offer
from wasstrip.pricing.errors import PriceComparisonError
from wasstrip.services.comparison_service import (
    ComparisonReport,
    ComparisonService,
)
from wasstrip.storage.file_manager import (
    FileManager,
    award_names,
    report_to_dict,
)
from wasstrip.storage.offer_repository import OfferRepository

logger = logging.getLogger("wasstrip.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_AWARD_LABELS: dict[str, str] = {
    "best_review": "Best reviewed",
    "best_sustainability": "Most sustainable",
    "best_deal_price": "Best deal (per wash)",
    "best_try_price": "Best try-out price",
}


def resolve_supplier(supplier_id: str | None) -> str | None:
    """Map a retailer id to the supplier name stored on products.

    Returns ``None`` when *supplier_id* is ``None``.
    Raises ``SystemExit`` on unknown ids.
    """
    if supplier_id is None:
        return None
    available = {r["id"]: r for r in Settings.RETAILERS}
    retailer = available.get(supplier_id.strip())
    if retailer is None:
        valid = ", ".join(sorted(available))
        _err.print(f"[red]Unknown retailer: {supplier_id}[/red]")
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)
    return retailer["label"]


def _money(value: float) -> str:
    return f"{Settings.CURRENCY_SYMBOL}{value:,.{Settings.PRICE_DECIMALS}f}"


def _per_wash(value: float) -> str:
    return (
        f"{Settings.CURRENCY_SYMBOL}"
        f"{value:.{Settings.PRICE_PER_WASH_DECIMALS}f}"
    )


def _print_table(report: ComparisonReport) -> None:
    """Render every product with its variants, cheapest marked, to stdout."""
    table = Table(
        title="Prices per wash",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Product", style="bold")
    table.add_column("Supplier", style="magenta")
    table.add_column("Offer", max_width=40)
    table.add_column("Price", justify="right")
    table.add_column("Per wash", justify="right", style="green")
    table.add_column("", width=2)

    for product in report.products:
        cheapest = report.result.per_product.get(product.id)
        if not product.variants:
            price = (
                _money(product.current_price)
                if product.current_price is not None
                else "N/A"
            )
            per_wash = (
                _per_wash(product.price_per_wash)
                if product.price_per_wash is not None
                else "N/A"
            )
            table.add_row(
                product.name,
                product.supplier,
                "[dim]no variants[/dim]",
                price,
                per_wash,
                "★" if cheapest is not None else "",
            )
            continue
        for idx, variant in enumerate(product.variants):
            is_cheapest = (
                cheapest is not None
                and cheapest.variant is not None
                and cheapest.variant.id == variant.id
            )
            table.add_row(
                product.name if idx == 0 else "",
                product.supplier if idx == 0 else "",
                variant.name,
                _money(variant.price),
                _per_wash(variant.price_per_wash),
                "★" if is_cheapest else "",
            )

    console = Console()
    console.print(table)
    _print_cheapest(console, report.result.cheapest)


def _print_cheapest(console: Console, offer: Offer) -> None:
    """Print the overall cheapest option below the table."""
    console.print("\n[bold]=== CHEAPEST OPTION ===[/bold]")
    console.print(f"{offer.product.name}: {offer.label}")
    console.print(
        f"Price: {_money(offer.price)} "
        f"({_per_wash(offer.price_per_wash)}/wash)"
    )


def _export(report: ComparisonReport) -> None:
    """Save JSON + CSV exports of the report."""
    try:
        file_manager = FileManager()
        path = file_manager.save_report(report)
        _err.print(f"[dim]Saved report → {path}[/dim]")
        csv_path = file_manager.export_csv(report)
        _err.print(f"[dim]Exported offers → {csv_path}[/dim]")
    except OSError as exc:
        logger.error("Export failed: %s", exc, exc_info=True)
        _err.print(f"[red]Export failed: {exc}[/red]")


def run_check_prices(
    supplier_id: str | None = None,
    output_format: str = "table",
    include_product_prices: bool = False,
    skip_invalid: bool = False,
    export: bool = False,
) -> int:
    """Compare all offers and print them; return an exit code."""
    supplier = resolve_supplier(supplier_id)
    service = ComparisonService()
    try:
        report = service.run(
            supplier=supplier,
            include_product_prices=include_product_prices,
            skip_invalid=skip_invalid,
        )
    except PriceComparisonError as exc:
        logger.error("Price comparison failed: %s", exc)
        _err.print(f"[red]Price comparison failed: {exc}[/red]")
        return 1
    finally:
        service.close()

    if report.skipped_count:
        _err.print(
            f"[yellow]Skipped {report.skipped_count} invalid entries[/yellow]"
        )

    if export:
        _export(report)

    if output_format == "table":
        _print_table(report)
    else:
        json.dump(
            report_to_dict(report),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


def run_seed(seed_path: str | None = None) -> int:
    """Replace the catalog with the contents of a seed file."""
    path = Path(seed_path) if seed_path else Settings.SEED_PATH
    if not path.exists():
        _err.print(f"[red]Seed file not found: {path}[/red]")
        return 1

    _err.print(f"[bold]Seeding database from {path.name}...[/bold]")
    repository = OfferRepository()
    try:
        count = repository.import_seed_file(path)
    except PriceComparisonError as exc:
        logger.error("Seeding failed: %s", exc)
        _err.print(f"[red]Seeding failed: {exc}[/red]")
        return 1
    finally:
        repository.close()

    if count == 0:
        _err.print("[yellow]No products imported.[/yellow]")
        return 1
    _err.print(f"[green]✓ Seeded {count} products[/green]")
    return 0


def run_awards() -> int:
    """Print which products win each award."""
    service = ComparisonService()
    try:
        report = service.run(include_product_prices=True, skip_invalid=True)
    except PriceComparisonError as exc:
        logger.error("Award calculation failed: %s", exc)
        _err.print(f"[red]Award calculation failed: {exc}[/red]")
        return 1
    finally:
        service.close()

    table = Table(
        title="Awards",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Award", style="bold")
    table.add_column("Winner(s)")

    by_name = {p.id: p.name for p in report.products}
    for key, label in _AWARD_LABELS.items():
        winners = [
            by_name[product_id]
            for product_id, awards in report.awards.items()
            if key in award_names(awards)
        ]
        table.add_row(label, ", ".join(winners) or "-")

    Console().print(table)
    return 0
