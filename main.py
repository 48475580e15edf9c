# main.py

"""Entry point for the wasstrip price comparison CLI."""

import argparse
import logging
import sys
from pathlib import Path

from wasstrip.config.logging_config import setup_logging
from wasstrip.config.settings import Settings

logger = logging.getLogger("wasstrip.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(r["id"] for r in Settings.RETAILERS)

    parser = argparse.ArgumentParser(
        prog="wasstrip",
        description="Dishwasher-strip price per wash comparison.",
        epilog=f"Available retailers: {valid_ids}",
    )
    parser.add_argument(
        "-s",
        "--supplier",
        default=None,
        help="Only compare one retailer's products (retailer id).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format (default: table).",
    )
    parser.add_argument(
        "--include-product-prices",
        action="store_true",
        default=False,
        dest="include_product_prices",
        help="Let products without variants compete for the overall cheapest.",
    )
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        default=False,
        dest="skip_invalid",
        help="Drop malformed variants instead of failing.",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        default=False,
        help="Also write JSON and CSV exports to results/.",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="Path to the SQLite database (default: data/offers.db).",
    )
    parser.add_argument(
        "--seed",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Replace the catalog with a JSON seed file (default: bundled).",
    )
    parser.add_argument(
        "--awards",
        action="store_true",
        default=False,
        help="Show the award winners.",
    )
    return parser


def main() -> None:
    """Route to seeding, awards, or the price check (default)."""
    log_file = setup_logging()
    logger.info("wasstrip starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.db_path is not None:
        Settings.DB_PATH = Path(args.db_path)

    from wasstrip.cli.runner import run_awards, run_check_prices, run_seed

    if args.seed is not None:
        exit_code = run_seed(args.seed or None)
    elif args.awards:
        exit_code = run_awards()
    else:
        exit_code = run_check_prices(
            supplier_id=args.supplier,
            output_format=args.output_format,
            include_product_prices=args.include_product_prices,
            skip_invalid=args.skip_invalid,
            export=args.export,
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
