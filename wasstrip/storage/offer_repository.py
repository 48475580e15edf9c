# wasstrip/storage/offer_repository.py

"""SQLite-backed catalog of products, variants and their price history."""

import json
import logging
import sqlite3
import uuid
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, cast

from wasstrip.config.settings import Settings
from wasstrip.models.price_point import PricePoint
from wasstrip.models.product import Product, ProductVariant, VariantData
from wasstrip.pricing.normalizer import (
    compute_price_per_wash,
    normalize_variant_name,
    parse_price,
    parse_wash_count,
)

logger = logging.getLogger("wasstrip.repository")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS products (
    id              TEXT    PRIMARY KEY,
    slug            TEXT    NOT NULL UNIQUE,
    name            TEXT    NOT NULL,
    supplier        TEXT    NOT NULL,
    current_price   REAL,
    price_per_wash  REAL,
    washes_per_pack INTEGER NOT NULL DEFAULT 60,
    currency        TEXT    NOT NULL DEFAULT 'EUR',
    in_stock        INTEGER NOT NULL DEFAULT 1,
    rating          REAL,
    review_count    INTEGER NOT NULL DEFAULT 0,
    sustainability  REAL,
    url             TEXT    NOT NULL DEFAULT '',
    display_order   INTEGER NOT NULL DEFAULT 0,
    last_checked    TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS product_variants (
    id             TEXT    PRIMARY KEY,
    product_id     TEXT    NOT NULL
                   REFERENCES products(id) ON DELETE CASCADE,
    position       INTEGER NOT NULL,
    name           TEXT    NOT NULL,
    wash_count     INTEGER NOT NULL,
    price          REAL    NOT NULL,
    price_per_wash REAL    NOT NULL,
    currency       TEXT    NOT NULL DEFAULT 'EUR',
    in_stock       INTEGER NOT NULL DEFAULT 1,
    is_default     INTEGER NOT NULL DEFAULT 0,
    url            TEXT    NOT NULL DEFAULT '',
    scraped_at     TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS price_history (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id     TEXT    NOT NULL
                   REFERENCES products(id) ON DELETE CASCADE,
    price          REAL    NOT NULL,
    price_per_wash REAL    NOT NULL,
    recorded_at    TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_variants_product
    ON product_variants(product_id, position);

CREATE INDEX IF NOT EXISTS idx_history_product_date
    ON price_history(product_id, recorded_at);
"""

_PRODUCT_COLUMNS = (
    "id, slug, name, supplier, current_price, price_per_wash, "
    "washes_per_pack, currency, in_stock, rating, review_count, "
    "sustainability, url, display_order"
)


def _new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def _variant_from_entry(entry: dict[str, Any]) -> VariantData:
    """Build a :class:`VariantData` from a seed-file dict.

    Prices may be given as storefront text ("€12,80") and the wash count
    as a pack description ("2 x 30 strips"); without a wash count it is
    read from the variant name.
    """
    name = str(entry.get("name", ""))

    raw_price = entry.get("price", 0)
    if isinstance(raw_price, str):
        price = parse_price(raw_price)
    else:
        price = float(raw_price or 0)

    raw_washes = entry.get("wash_count")
    if isinstance(raw_washes, str):
        washes = parse_wash_count(raw_washes, default=0) or 0
    elif raw_washes is None:
        washes = parse_wash_count(name, default=0) or 0
    else:
        washes = int(raw_washes)

    return VariantData(
        name=name,
        price=price,
        wash_count=washes,
        currency=str(entry.get("currency", Settings.DEFAULT_CURRENCY)),
        in_stock=bool(entry.get("in_stock", True)),
        is_default=bool(entry.get("is_default", False)),
        url=str(entry.get("url", "")),
    )


class OfferRepository:
    """SQLite store that serves read-only product snapshots."""

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)
        logger.debug("OfferRepository opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Writing ──────────────────────────────────────────

    def _insert_variants(
        self,
        cur: sqlite3.Cursor,
        product_id: str,
        variants: Sequence[VariantData],
        ts: str,
    ) -> VariantData | None:
        """Insert *variants* for a product and return the default one.

        The first variant becomes the default unless another is flagged.
        Raises ``InvalidVariantError`` before anything is written for a
        variant that cannot be priced per wash.
        """
        priced = [
            (v, compute_price_per_wash(v.price, v.wash_count))
            for v in variants
        ]
        flagged = any(v.is_default for v in variants)
        default: VariantData | None = None

        for position, (v, per_wash) in enumerate(priced):
            is_default = v.is_default or (not flagged and position == 0)
            if is_default and default is None:
                default = v
            cur.execute(
                "INSERT INTO product_variants "
                "(id, product_id, position, name, wash_count, price, "
                " price_per_wash, currency, in_stock, is_default, url, "
                " scraped_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    _new_id(),
                    product_id,
                    position,
                    normalize_variant_name(v.name),
                    v.wash_count,
                    v.price,
                    per_wash,
                    v.currency,
                    int(v.in_stock),
                    int(is_default),
                    v.url,
                    ts,
                ),
            )
        return default

    def _record_price(
        self,
        cur: sqlite3.Cursor,
        product_id: str,
        price: float | None,
        per_wash: float | None,
        ts: str,
    ) -> None:
        """Append a price point when both prices are known."""
        if price is None or per_wash is None:
            return
        cur.execute(
            "INSERT INTO price_history "
            "(product_id, price, price_per_wash, recorded_at) "
            "VALUES (?, ?, ?, ?)",
            (product_id, price, per_wash, ts),
        )

    def upsert_product_with_variants(
        self,
        slug: str,
        name: str,
        supplier: str,
        variants: Sequence[VariantData],
        url: str = "",
        in_stock: bool = True,
        checked_at: datetime | None = None,
    ) -> Product:
        """Create or update a product by slug and replace its variants.

        Runs in a single transaction.  The default variant's price, price
        per wash and wash count are copied onto the product row, and a
        price point is recorded.
        """
        ts = (checked_at or datetime.now()).isoformat()

        with self._conn:
            cur = self._conn.cursor()
            row = cur.execute(
                "SELECT id FROM products WHERE slug = ?", (slug,),
            ).fetchone()
            if row is None:
                product_id = _new_id()
                cur.execute(
                    "INSERT INTO products "
                    "(id, slug, name, supplier, url, in_stock, "
                    " washes_per_pack, last_checked) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        product_id, slug, name, supplier, url,
                        int(in_stock),
                        Settings.DEFAULT_WASHES_PER_PACK,
                        ts,
                    ),
                )
            else:
                product_id = str(row[0])
                cur.execute(
                    "UPDATE products SET name = ?, supplier = ?, "
                    "url = ?, in_stock = ?, last_checked = ? "
                    "WHERE id = ?",
                    (name, supplier, url, int(in_stock), ts, product_id),
                )

            cur.execute(
                "DELETE FROM product_variants WHERE product_id = ?",
                (product_id,),
            )
            default = self._insert_variants(cur, product_id, variants, ts)

            if default is not None:
                per_wash = compute_price_per_wash(
                    default.price, default.wash_count,
                )
                cur.execute(
                    "UPDATE products SET current_price = ?, "
                    "price_per_wash = ?, washes_per_pack = ? "
                    "WHERE id = ?",
                    (
                        default.price, per_wash,
                        default.wash_count, product_id,
                    ),
                )
                self._record_price(
                    cur, product_id, default.price, per_wash, ts,
                )

        logger.info(
            "Upserted %s (%s) with %d variants",
            name,
            supplier,
            len(variants),
        )
        product = self.get_product(slug)
        if product is None:
            raise LookupError(f"product {slug!r} vanished after upsert")
        return product

    def seed_products(
        self,
        entries: Sequence[dict[str, Any]],
        seeded_at: datetime | None = None,
    ) -> int:
        """Replace the whole catalog with *entries*.

        Each entry is a plain dict with product fields and an optional
        ``variants`` list.  A product without variants but with a price
        and pack size gets its price per wash computed.  Returns the
        number of products created.
        """
        ts = (seeded_at or datetime.now()).isoformat()
        count = 0

        with self._conn:
            cur = self._conn.cursor()
            cur.execute("DELETE FROM price_history")
            cur.execute("DELETE FROM product_variants")
            cur.execute("DELETE FROM products")

            for order, entry in enumerate(entries):
                product_id = _new_id()
                washes = int(
                    entry.get("washes_per_pack")
                    or Settings.DEFAULT_WASHES_PER_PACK
                )
                raw_price = entry.get("current_price")
                price = float(raw_price) if raw_price is not None else None
                raw_per_wash = entry.get("price_per_wash")
                if raw_per_wash is not None:
                    per_wash: float | None = float(raw_per_wash)
                elif price is not None:
                    per_wash = compute_price_per_wash(price, washes)
                else:
                    per_wash = None

                cur.execute(
                    f"INSERT INTO products ({_PRODUCT_COLUMNS}, last_checked) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        product_id,
                        str(entry["slug"]),
                        str(entry["name"]),
                        str(entry.get("supplier", entry["name"])),
                        price,
                        per_wash,
                        washes,
                        str(entry.get("currency", Settings.DEFAULT_CURRENCY)),
                        int(bool(entry.get("in_stock", True))),
                        entry.get("rating"),
                        int(entry.get("review_count", 0) or 0),
                        entry.get("sustainability"),
                        str(entry.get("url", "")),
                        int(entry.get("display_order", order)),
                        ts,
                    ),
                )

                raw_variants = cast(
                    list[dict[str, Any]], entry.get("variants") or [],
                )
                default = self._insert_variants(
                    cur,
                    product_id,
                    [_variant_from_entry(v) for v in raw_variants],
                    ts,
                )
                if default is not None:
                    price = default.price
                    per_wash = compute_price_per_wash(
                        default.price, default.wash_count,
                    )
                    cur.execute(
                        "UPDATE products SET current_price = ?, "
                        "price_per_wash = ?, washes_per_pack = ? "
                        "WHERE id = ?",
                        (price, per_wash, default.wash_count, product_id),
                    )
                self._record_price(cur, product_id, price, per_wash, ts)
                count += 1

        logger.info("Seeded %d products", count)
        return count

    def import_seed_file(self, filepath: Path) -> int:
        """Seed the catalog from a JSON file holding a list of products.

        Unreadable or malformed files are logged and import nothing.
        """
        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read %s: %s",
                filepath.name,
                exc,
            )
            return 0

        if not isinstance(data, list):
            logger.warning(
                "Seed file %s does not hold a list of products",
                filepath.name,
            )
            return 0

        items: list[object] = cast(list[object], data)
        entries: list[dict[str, Any]] = [
            e for e in items
            if isinstance(e, dict) and "slug" in e and "name" in e
        ]
        if len(entries) != len(items):
            logger.warning(
                "Skipped %d malformed entries in %s",
                len(items) - len(entries),
                filepath.name,
            )
        return self.seed_products(entries)

    # ── Reading ──────────────────────────────────────────

    def _variants_by_product(
        self, product_id: str | None = None,
    ) -> dict[str, list[ProductVariant]]:
        """Load variants (all, or one product's), grouped by product id."""
        where = "WHERE product_id = ? " if product_id is not None else ""
        params = (product_id,) if product_id is not None else ()
        rows = self._conn.execute(
            "SELECT id, product_id, name, price, wash_count, currency, "
            "       in_stock, is_default, url "
            f"FROM product_variants {where}"
            "ORDER BY product_id, position",
            params,
        ).fetchall()
        grouped: dict[str, list[ProductVariant]] = {}
        for r in rows:
            grouped.setdefault(r[1], []).append(
                ProductVariant(
                    id=r[0],
                    product_id=r[1],
                    name=r[2],
                    price=r[3],
                    wash_count=r[4],
                    currency=r[5],
                    in_stock=bool(r[6]),
                    is_default=bool(r[7]),
                    url=r[8],
                )
            )
        return grouped

    @staticmethod
    def _product_from_row(
        row: Sequence[Any],
        variants: list[ProductVariant],
    ) -> Product:
        return Product(
            id=row[0],
            slug=row[1],
            name=row[2],
            supplier=row[3],
            current_price=row[4],
            price_per_wash=row[5],
            washes_per_pack=row[6],
            currency=row[7],
            in_stock=bool(row[8]),
            rating=row[9],
            review_count=row[10],
            sustainability=row[11],
            url=row[12],
            display_order=row[13],
            variants=tuple(variants),
        )

    def load_snapshot(
        self,
        supplier: str | None = None,
        in_stock_only: bool = False,
    ) -> list[Product]:
        """Return products with their variants attached.

        Ordered by display order, then name.  Optionally restricted to one
        supplier (case-insensitive) and to in-stock products.
        """
        clauses: list[str] = []
        params: list[object] = []
        if supplier is not None:
            clauses.append("LOWER(supplier) = LOWER(?)")
            params.append(supplier)
        if in_stock_only:
            clauses.append("in_stock = 1")
        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""

        rows = self._conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products "
            f"{where}"
            "ORDER BY display_order ASC, name ASC",
            params,
        ).fetchall()
        variants = self._variants_by_product()
        products = [
            self._product_from_row(r, variants.get(r[0], []))
            for r in rows
        ]
        logger.debug(
            "Loaded snapshot of %d products (supplier=%s, in_stock_only=%s)",
            len(products),
            supplier,
            in_stock_only,
        )
        return products

    def get_product(self, slug: str) -> Product | None:
        """Return one product with its variants, or ``None``."""
        row = self._conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE slug = ?",
            (slug,),
        ).fetchone()
        if row is None:
            return None
        variants = self._variants_by_product(row[0]).get(row[0], [])
        return self._product_from_row(row, variants)

    def get_price_history(self, slug: str) -> list[PricePoint]:
        """Return all price points for a product, oldest first."""
        rows = self._conn.execute(
            "SELECT h.product_id, h.price, h.price_per_wash, h.recorded_at "
            "FROM price_history h "
            "JOIN products p ON p.id = h.product_id "
            "WHERE p.slug = ? "
            "ORDER BY h.recorded_at ASC, h.id ASC",
            (slug,),
        ).fetchall()
        return [
            PricePoint(
                product_id=r[0],
                price=r[1],
                price_per_wash=r[2],
                recorded_at=datetime.fromisoformat(r[3]),
            )
            for r in rows
        ]
