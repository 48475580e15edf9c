# wasstrip/config/settings.py

"""Central configuration for the wasstrip price comparison."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the wasstrip price comparison."""

    # --- Pricing ---
    DEFAULT_CURRENCY: str = "EUR"
    CURRENCY_SYMBOL: str = "€"
    DEFAULT_WASHES_PER_PACK: int = 60   # Pack size when none is known
    SMALL_PACK_MAX_WASHES: int = 60     # Upper bound for "try-out" packs
    PRICE_DECIMALS: int = 2             # Display precision, absolute price
    PRICE_PER_WASH_DECIMALS: int = 3    # Display precision, per wash

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SEED_PATH: Path = BASE_DIR / "wasstrip" / "config" / "seed_products.json"
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"
    DB_PATH: Path = Path(
        os.getenv("WASSTRIP_DB_PATH", str(BASE_DIR / "data" / "offers.db"))
    )

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("WASSTRIP_LOG_LEVEL", "WARNING")  # stderr only

    # --- Retailers (supplier names as stored on products) ---
    RETAILERS: list[dict[str, str]] = [
        {
            "id": "wasstrip_nl",
            "label": "Wasstrip.nl",
            "url": "https://wasstrip.nl",
        },
        {
            "id": "mothers_earth",
            "label": "Mother's Earth",
            "url": "https://mothersearth.nl",
        },
        {
            "id": "bubblyfy",
            "label": "Bubblyfy",
            "url": "https://bubblyfy.com",
        },
        {
            "id": "cosmeau",
            "label": "Cosmeau",
            "url": "https://cosmeau.nl",
        },
        {
            "id": "bio_suds",
            "label": "Bio-Suds",
            "url": "https://bio-suds.com",
        },
        {
            "id": "natuwash",
            "label": "NATUWASH",
            "url": "https://natuwash.com",
        },
        {
            "id": "greengoods",
            "label": "GREENGOODS",
            "url": "https://www.bol.com",
        },
    ]
