"""Tests for Product and Batch conversion from stored documents."""

from decimal import Decimal

import pytest

from stock_kernel.domain.catalog import Batch, Product, products_from_documents
from stock_kernel.exceptions import MalformedDocumentError

PRODUCT_DOC = {
    "id": "P1",
    "name": "Paracetamol 500",
    "company": "Acme Pharma",
    "barcode": "8901234567890",
    "unitsPerStrip": 10,
    "openingStock": 12,
    "batches": [
        {
            "id": "B1",
            "batchNumber": "PX-01",
            "stock": -4,
            "openingStock": 100,
            "purchasePrice": "500",
            "mrp": "650.00",
            "expiryDate": "2025-03",
        },
        "garbage",
    ],
}


class TestProduct:
    """Tests for product documents."""

    def test_from_document(self):
        product = Product.from_document(PRODUCT_DOC)
        assert product.units_per_strip == 10
        assert product.opening_stock == 12
        assert len(product.batches) == 1
        batch = product.batches[0]
        assert batch.stock == -4
        assert batch.purchase_price == Decimal("500")
        assert batch.expiry_date == "2025-03"

    def test_defaults(self):
        product = Product.from_document({"id": "P2", "name": "Bandage"})
        assert product.units_per_strip == 1
        assert product.barcode is None
        assert product.batches == ()

    def test_blank_barcode_is_none(self):
        assert Product.from_document({"id": "P", "barcode": "  "}).barcode is None

    def test_non_mapping_rejected(self):
        with pytest.raises(MalformedDocumentError):
            Product.from_document("P1")

    def test_products_are_immutable(self):
        product = Product.from_document(PRODUCT_DOC)
        with pytest.raises(AttributeError):
            product.name = "changed"


class TestBatch:
    """Tests for batch documents."""

    def test_non_finite_price_defaults_to_zero(self):
        batch = Batch.from_document({"id": "b", "purchasePrice": "NaN"})
        assert batch.purchase_price == Decimal("0")

    def test_missing_expiry(self):
        assert Batch.from_document({"id": "b", "expiryDate": ""}).expiry_date is None


class TestProductsFromDocuments:
    """Tombstones survive conversion so that consumers can skip them."""

    def test_tombstones_preserved(self):
        products = products_from_documents([PRODUCT_DOC, None])
        assert products[0].id == "P1"
        assert products[1] is None

    def test_malformed_documents_dropped_and_logged(self, captured_logs):
        products = products_from_documents(["bad", PRODUCT_DOC, None, ["also", "bad"]])
        assert [p.id if p else None for p in products] == ["P1", None]

        skipped = [r for r in captured_logs() if r["message"] == "document_skipped_malformed"]
        assert [(r["document_type"], r["position"]) for r in skipped] == [
            ("product", 0), ("product", 3),
        ]


class TestNonFiniteNumbers:
    """Infinite stock figures parse as zero instead of raising."""

    def test_infinite_opening_stock(self):
        product = Product.from_document({"id": "P", "name": "X", "openingStock": "Infinity"})
        assert product.opening_stock == 0

    def test_infinite_pack_size_uses_default(self):
        product = Product.from_document({"id": "P", "name": "X", "unitsPerStrip": "inf"})
        assert product.units_per_strip == 1

    def test_infinite_batch_stock(self):
        batch = Batch.from_document({"id": "b", "stock": float("-inf"), "openingStock": "NaN"})
        assert batch.stock == 0
        assert batch.opening_stock == 0
