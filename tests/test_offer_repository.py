# tests/test_offer_repository.py

"""Tests for the SQLite offer repository."""

import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from wasstrip.config.settings import Settings
from wasstrip.models.product import VariantData
from wasstrip.pricing.errors import InvalidVariantError
from wasstrip.storage.offer_repository import OfferRepository


def _seed_entries() -> list[dict[str, object]]:
    """Return a small seed catalog."""
    return [
        {
            "slug": "wasstrip-nl",
            "name": "Wasstrip.nl",
            "supplier": "Wasstrip.nl",
            "rating": 4.2,
            "variants": [
                {"name": "80 strips", "price": 12.80, "wash_count": 80},
                {"name": "160 strips", "price": 22.40, "wash_count": 160},
            ],
        },
        {
            "slug": "cosmeau",
            "name": "Cosmeau",
            "supplier": "Cosmeau",
            "current_price": 15.00,
            "price_per_wash": 0.25,
            "washes_per_pack": 60,
        },
        {
            "slug": "bio-suds",
            "name": "Bio-Suds",
            "supplier": "Bio-Suds",
            "current_price": 17.40,
            "washes_per_pack": 60,
            "in_stock": False,
        },
    ]


class TestOfferRepository(unittest.TestCase):
    """Tests for the OfferRepository class."""

    def setUp(self) -> None:
        """Create a fresh temp DB for each test."""
        self.tmp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.tmp_dir) / "test.db"
        self.repo = OfferRepository(db_path=self.db_path)

    def tearDown(self) -> None:
        """Close the database."""
        self.repo.close()

    # ── seed_products ────────────────────────────────────

    def test_seed_returns_count(self) -> None:
        """All entries are created."""
        self.assertEqual(self.repo.seed_products(_seed_entries()), 3)
        self.assertEqual(len(self.repo.load_snapshot()), 3)

    def test_seed_replaces_catalog(self) -> None:
        """Seeding twice leaves only the second catalog."""
        self.repo.seed_products(_seed_entries())
        self.repo.seed_products(_seed_entries()[:1])
        self.assertEqual(len(self.repo.load_snapshot()), 1)

    def test_seed_variants_attached(self) -> None:
        """Variants come back with their owning product id."""
        self.repo.seed_products(_seed_entries())
        product = self.repo.get_product("wasstrip-nl")
        assert product is not None
        self.assertEqual(len(product.variants), 2)
        for variant in product.variants:
            self.assertEqual(variant.product_id, product.id)

    def test_seed_default_variant_prices_product(self) -> None:
        """The first variant's prices are copied onto the product."""
        self.repo.seed_products(_seed_entries())
        product = self.repo.get_product("wasstrip-nl")
        assert product is not None
        self.assertEqual(product.current_price, 12.80)
        self.assertAlmostEqual(product.price_per_wash or 0.0, 0.16)
        self.assertEqual(product.washes_per_pack, 80)
        self.assertTrue(product.variants[0].is_default)
        self.assertFalse(product.variants[1].is_default)

    def test_seed_keeps_explicit_price_per_wash(self) -> None:
        """A given price_per_wash is stored as-is."""
        self.repo.seed_products(_seed_entries())
        product = self.repo.get_product("cosmeau")
        assert product is not None
        self.assertEqual(product.price_per_wash, 0.25)
        self.assertEqual(product.variants, ())

    def test_seed_computes_missing_price_per_wash(self) -> None:
        """price_per_wash is derived from price and pack size."""
        self.repo.seed_products(_seed_entries())
        product = self.repo.get_product("bio-suds")
        assert product is not None
        self.assertAlmostEqual(product.price_per_wash or 0.0, 0.29)

    def test_seed_invalid_variant_rolls_back(self) -> None:
        """A zero-wash variant aborts the seed and keeps the old data."""
        self.repo.seed_products(_seed_entries())
        bad = [{
            "slug": "broken",
            "name": "Broken",
            "variants": [{"name": "?", "price": 5.0, "wash_count": 0}],
        }]
        with self.assertRaises(InvalidVariantError):
            self.repo.seed_products(bad)
        self.assertEqual(len(self.repo.load_snapshot()), 3)

    def test_seed_parses_text_prices_and_packs(self) -> None:
        """Storefront price text and pack descriptions are parsed."""
        self.repo.seed_products([{
            "slug": "text-shop",
            "name": "Text Shop",
            "variants": [
                {"name": "Duo", "price": "€12,80", "wash_count": "2 x 30 strips"},
                {"name": "64 wasbeurten", "price": "€ 14,08"},
            ],
        }])
        product = self.repo.get_product("text-shop")
        assert product is not None
        first, second = product.variants
        self.assertAlmostEqual(first.price, 12.80)
        self.assertEqual(first.wash_count, 60)
        self.assertAlmostEqual(second.price, 14.08)
        self.assertEqual(second.wash_count, 64)

    def test_seed_unparseable_pack_size_rolls_back(self) -> None:
        """A variant whose wash count cannot be read is rejected."""
        bad = [{
            "slug": "vague",
            "name": "Vague",
            "variants": [{"name": "Family size", "price": "€9,99"}],
        }]
        with self.assertRaises(InvalidVariantError):
            self.repo.seed_products(bad)

    def test_seed_records_price_history(self) -> None:
        """Each seeded product gets an initial price point."""
        self.repo.seed_products(
            _seed_entries(), seeded_at=datetime(2026, 1, 1),
        )
        history = self.repo.get_price_history("cosmeau")
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].price, 15.00)
        self.assertEqual(history[0].recorded_at, datetime(2026, 1, 1))

    # ── import_seed_file ─────────────────────────────────

    def test_import_seed_file(self) -> None:
        """A JSON list of products is imported."""
        path = Path(self.tmp_dir) / "seed.json"
        path.write_text(json.dumps(_seed_entries()), encoding="utf-8")
        self.assertEqual(self.repo.import_seed_file(path), 3)

    def test_import_bundled_seed_file(self) -> None:
        """The bundled seed file imports cleanly."""
        count = self.repo.import_seed_file(Settings.SEED_PATH)
        self.assertGreater(count, 0)

    def test_import_bad_json(self) -> None:
        """Malformed JSON imports nothing."""
        path = Path(self.tmp_dir) / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        self.assertEqual(self.repo.import_seed_file(path), 0)

    def test_import_missing_file(self) -> None:
        """A missing file imports nothing."""
        path = Path(self.tmp_dir) / "missing.json"
        self.assertEqual(self.repo.import_seed_file(path), 0)

    def test_import_non_list(self) -> None:
        """A JSON object instead of a list imports nothing."""
        path = Path(self.tmp_dir) / "obj.json"
        path.write_text('{"slug": "x"}', encoding="utf-8")
        self.assertEqual(self.repo.import_seed_file(path), 0)

    def test_import_skips_malformed_entries(self) -> None:
        """Entries without slug or name are skipped."""
        path = Path(self.tmp_dir) / "partial.json"
        entries = _seed_entries() + [{"name": "No slug"}, "junk"]
        path.write_text(json.dumps(entries), encoding="utf-8")
        self.assertEqual(self.repo.import_seed_file(path), 3)

    # ── upsert_product_with_variants ─────────────────────

    def test_upsert_creates_product(self) -> None:
        """A new slug creates a product with its variants."""
        product = self.repo.upsert_product_with_variants(
            slug="greengoods",
            name="GreenGoods",
            supplier="GREENGOODS",
            variants=[
                VariantData(name="60 strips", price=34.95, wash_count=120),
                VariantData(name="Proef", price=3.95, wash_count=10),
            ],
        )
        self.assertEqual(product.slug, "greengoods")
        self.assertEqual(len(product.variants), 2)
        self.assertEqual(product.current_price, 34.95)

    def test_upsert_replaces_variants(self) -> None:
        """A second upsert replaces the variant list."""
        self.repo.upsert_product_with_variants(
            "p", "P", "S",
            [VariantData(name="a", price=10.0, wash_count=40)],
        )
        product = self.repo.upsert_product_with_variants(
            "p", "P2", "S",
            [
                VariantData(name="b", price=12.0, wash_count=60),
                VariantData(name="c", price=20.0, wash_count=120),
            ],
        )
        self.assertEqual(product.name, "P2")
        self.assertEqual([v.name for v in product.variants], ["b", "c"])
        self.assertEqual(len(self.repo.load_snapshot()), 1)

    def test_upsert_flagged_default(self) -> None:
        """An explicitly flagged default variant prices the product."""
        product = self.repo.upsert_product_with_variants(
            "p", "P", "S",
            [
                VariantData(name="a", price=10.0, wash_count=40),
                VariantData(
                    name="b", price=18.0, wash_count=120, is_default=True,
                ),
            ],
        )
        self.assertEqual(product.current_price, 18.0)
        self.assertEqual(product.washes_per_pack, 120)
        self.assertFalse(product.variants[0].is_default)
        self.assertTrue(product.variants[1].is_default)

    def test_upsert_normalises_variant_names(self) -> None:
        """'Stuks' names are rewritten to 'Packs'."""
        product = self.repo.upsert_product_with_variants(
            "p", "P", "S",
            [VariantData(name="3 Stuks", price=27.5, wash_count=180)],
        )
        self.assertEqual(product.variants[0].name, "3 Packs")

    def test_upsert_invalid_variant_rolls_back(self) -> None:
        """A zero-wash variant leaves the existing variants in place."""
        self.repo.upsert_product_with_variants(
            "p", "P", "S",
            [VariantData(name="a", price=10.0, wash_count=40)],
        )
        with self.assertRaises(InvalidVariantError):
            self.repo.upsert_product_with_variants(
                "p", "P", "S",
                [VariantData(name="z", price=10.0, wash_count=0)],
            )
        product = self.repo.get_product("p")
        assert product is not None
        self.assertEqual([v.name for v in product.variants], ["a"])

    def test_upsert_accumulates_history(self) -> None:
        """Each upsert adds a price point."""
        self.repo.upsert_product_with_variants(
            "p", "P", "S",
            [VariantData(name="a", price=10.0, wash_count=40)],
            checked_at=datetime(2026, 1, 1),
        )
        self.repo.upsert_product_with_variants(
            "p", "P", "S",
            [VariantData(name="a", price=9.0, wash_count=40)],
            checked_at=datetime(2026, 1, 2),
        )
        history = self.repo.get_price_history("p")
        self.assertEqual([h.price for h in history], [10.0, 9.0])

    # ── load_snapshot ────────────────────────────────────

    def test_snapshot_ordered_by_display_order(self) -> None:
        """Seed order becomes display order."""
        self.repo.seed_products(_seed_entries())
        names = [p.name for p in self.repo.load_snapshot()]
        self.assertEqual(names, ["Wasstrip.nl", "Cosmeau", "Bio-Suds"])

    def test_snapshot_filter_supplier(self) -> None:
        """Supplier filter is case-insensitive."""
        self.repo.seed_products(_seed_entries())
        products = self.repo.load_snapshot(supplier="cosmeau")
        self.assertEqual([p.slug for p in products], ["cosmeau"])

    def test_snapshot_in_stock_only(self) -> None:
        """Out-of-stock products are excluded on request."""
        self.repo.seed_products(_seed_entries())
        products = self.repo.load_snapshot(in_stock_only=True)
        self.assertNotIn("bio-suds", [p.slug for p in products])

    def test_snapshot_empty_db(self) -> None:
        """An empty database yields an empty snapshot."""
        self.assertEqual(self.repo.load_snapshot(), [])

    def test_get_product_missing(self) -> None:
        """Unknown slugs return None."""
        self.assertIsNone(self.repo.get_product("nope"))


if __name__ == "__main__":
    unittest.main()
