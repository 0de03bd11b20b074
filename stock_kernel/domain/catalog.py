"""
Catalog -- Product and Batch value objects.

A Product exclusively owns its Batches.  Stock figures are signed integers
in atomic units (tablets, capsules, ...); prices are per pack and must be
divided by the product's pack size to get a per-unit cost.

Products arrive from the document store as camelCase dictionaries and are
converted once, here, into frozen dataclasses.  ``None`` entries in a
product collection are tombstones and are preserved by
``products_from_documents`` so that consumers can skip them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from stock_kernel.domain.fields import (
    as_decimal,
    as_int,
    as_optional_text,
    as_text,
)
from stock_kernel.exceptions import MalformedDocumentError
from stock_kernel.logging_config import get_logger

logger = get_logger("domain.catalog")


@dataclass(frozen=True)
class Batch:
    """A purchased lot of a product with its own expiry, cost and stock."""

    id: str
    batch_number: str
    stock: int = 0
    opening_stock: int = 0
    purchase_price: Decimal = Decimal("0")  # per pack
    mrp: Decimal = Decimal("0")  # per pack
    expiry_date: str | None = None  # YYYY-MM, None = never expires

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Batch:
        if not isinstance(document, Mapping):
            raise MalformedDocumentError("batch", "expected a mapping")
        return cls(
            id=as_text(document.get("id")),
            batch_number=as_text(document.get("batchNumber")),
            stock=as_int(document.get("stock")),
            opening_stock=as_int(document.get("openingStock")),
            purchase_price=as_decimal(document.get("purchasePrice")),
            mrp=as_decimal(document.get("mrp")),
            expiry_date=as_optional_text(document.get("expiryDate")),
        )


@dataclass(frozen=True)
class Product:
    """
    A sellable item and its batches.

    ``units_per_strip`` is kept as stored; consumers coerce unset or
    non-positive values to 1 before dividing by it.
    ``opening_stock`` is the product-wide historical carry-forward figure,
    distinct from any batch's own opening stock.
    """

    id: str
    name: str
    company: str = ""
    barcode: str | None = None
    units_per_strip: int = 1
    opening_stock: int = 0
    batches: tuple[Batch, ...] = ()

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Product:
        if not isinstance(document, Mapping):
            raise MalformedDocumentError("product", "expected a mapping")
        raw_batches = document.get("batches")
        batches = tuple(
            Batch.from_document(b)
            for b in (raw_batches if isinstance(raw_batches, list) else [])
            if isinstance(b, Mapping)
        )
        return cls(
            id=as_text(document.get("id")),
            name=as_text(document.get("name")),
            company=as_text(document.get("company")),
            barcode=as_optional_text(document.get("barcode")),
            units_per_strip=as_int(document.get("unitsPerStrip"), default=1),
            opening_stock=as_int(document.get("openingStock")),
            batches=batches,
        )


def products_from_documents(
    documents: Iterable[Mapping[str, Any] | None],
) -> tuple[Product | None, ...]:
    """
    Convert stored product documents, keeping tombstones as ``None``.

    A document that is not product-shaped is dropped and logged.
    """
    products: list[Product | None] = []
    for position, document in enumerate(documents):
        if document is None:
            products.append(None)
            continue
        try:
            products.append(Product.from_document(document))
        except MalformedDocumentError as e:
            logger.warning("document_skipped_malformed", extra={
                "document_type": e.document_type,
                "position": position,
                "reason": e.reason,
            })
    return tuple(products)
