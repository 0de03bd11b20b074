"""
Records -- source transaction records, one closed variant per family.

Responsibility:
    Convert the four stored record families (purchases, sales/bills,
    purchase returns, sale returns) from their loosely shaped documents
    into frozen dataclasses with a fixed set of fields.  The collector
    turns these into movements; nothing downstream sees a document.

Quantities:
    - Purchase lines and purchase-return lines are in packs; the
      collector multiplies by the line's (or product's) pack size.
    - Sale lines and sale-return lines are already in atomic units.

Dates:
    Dates are kept as stored (``raw_date``).  Parsing happens when a
    record is collected, so that one malformed date drops that record
    only, instead of failing the whole conversion.
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
    items_of,
)
from stock_kernel.exceptions import MalformedDocumentError
from stock_kernel.logging_config import get_logger

logger = get_logger("domain.records")


def _require_mapping(document: Any, document_type: str) -> Mapping[str, Any]:
    if not isinstance(document, Mapping):
        raise MalformedDocumentError(document_type, "expected a mapping")
    return document


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseLine:
    """
    A purchase invoice line.  Identity is loose: the operator may have
    linked an existing product, scanned a barcode, or typed a name and
    company for a new product.
    """

    product_name: str
    company: str
    quantity: int  # packs
    product_id: str | None = None
    barcode: str | None = None
    batch_number: str = ""
    units_per_strip: int | None = None
    mrp: Decimal = Decimal("0")
    purchase_price: Decimal = Decimal("0")

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> PurchaseLine:
        document = _require_mapping(document, "purchase line")
        units = as_int(document.get("unitsPerStrip"))
        return cls(
            product_name=as_text(document.get("productName")),
            company=as_text(document.get("company")),
            quantity=as_int(document.get("quantity")),
            product_id=as_optional_text(document.get("productId")),
            barcode=as_optional_text(document.get("barcode")),
            batch_number=as_text(document.get("batchNumber")),
            units_per_strip=units or None,
            mrp=as_decimal(document.get("mrp")),
            purchase_price=as_decimal(document.get("purchasePrice")),
        )


@dataclass(frozen=True)
class SaleLine:
    """A bill line.  Always carries the resolved product id."""

    product_id: str
    quantity: int  # atomic units
    batch_id: str | None = None
    batch_number: str = ""
    mrp: Decimal = Decimal("0")

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> SaleLine:
        document = _require_mapping(document, "sale line")
        return cls(
            product_id=as_text(document.get("productId")),
            quantity=as_int(document.get("quantity")),
            batch_id=as_optional_text(document.get("batchId")),
            batch_number=as_text(document.get("batchNumber")),
            mrp=as_decimal(document.get("mrp")),
        )


@dataclass(frozen=True)
class ReturnLine:
    """
    A purchase-return or sale-return line.

    Purchase returns are keyed in packs (converted with ``units_per_strip``
    or the product's pack size); sale returns are in atomic units.
    """

    product_id: str
    quantity: int
    batch_id: str | None = None
    batch_number: str = ""
    units_per_strip: int | None = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> ReturnLine:
        document = _require_mapping(document, "return line")
        units = as_int(document.get("unitsPerStrip"))
        return cls(
            product_id=as_text(document.get("productId")),
            quantity=as_int(document.get("quantity")),
            batch_id=as_optional_text(document.get("batchId")),
            batch_number=as_text(document.get("batchNumber")),
            units_per_strip=units or None,
        )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseRecord:
    """A supplier purchase invoice."""

    id: str
    raw_date: Any
    items: tuple[PurchaseLine, ...] = ()
    invoice_number: str = ""
    supplier: str = ""

    @property
    def reference(self) -> str:
        return self.invoice_number or self.id

    @property
    def party(self) -> str:
        return self.supplier

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> PurchaseRecord:
        document = _require_mapping(document, "purchase")
        return cls(
            id=as_text(document.get("id")),
            raw_date=document.get("invoiceDate"),
            items=tuple(
                PurchaseLine.from_document(item)
                for item in items_of(document)
                if isinstance(item, Mapping)
            ),
            invoice_number=as_text(document.get("invoiceNumber")),
            supplier=as_text(document.get("supplier")),
        )


@dataclass(frozen=True)
class SaleRecord:
    """A customer bill."""

    id: str
    raw_date: Any
    items: tuple[SaleLine, ...] = ()
    bill_number: str = ""
    customer_name: str = ""

    @property
    def reference(self) -> str:
        return self.bill_number or self.id

    @property
    def party(self) -> str:
        return self.customer_name

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> SaleRecord:
        document = _require_mapping(document, "sale")
        return cls(
            id=as_text(document.get("id")),
            raw_date=document.get("date"),
            items=tuple(
                SaleLine.from_document(item)
                for item in items_of(document)
                if isinstance(item, Mapping)
            ),
            bill_number=as_text(document.get("billNumber")),
            customer_name=as_text(document.get("customerName")),
        )


@dataclass(frozen=True)
class PurchaseReturnRecord:
    """Goods sent back to a supplier."""

    id: str
    raw_date: Any
    items: tuple[ReturnLine, ...] = ()
    return_number: str = ""
    supplier: str = ""

    @property
    def reference(self) -> str:
        return self.return_number or self.id

    @property
    def party(self) -> str:
        return self.supplier

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> PurchaseReturnRecord:
        document = _require_mapping(document, "purchase return")
        return cls(
            id=as_text(document.get("id")),
            raw_date=document.get("date"),
            items=tuple(
                ReturnLine.from_document(item)
                for item in items_of(document)
                if isinstance(item, Mapping)
            ),
            return_number=as_text(document.get("returnNumber")),
            supplier=as_text(document.get("supplier")),
        )


@dataclass(frozen=True)
class SaleReturnRecord:
    """Goods brought back by a customer."""

    id: str
    raw_date: Any
    items: tuple[ReturnLine, ...] = ()
    return_number: str = ""
    customer_name: str = ""

    @property
    def reference(self) -> str:
        return self.return_number or self.id

    @property
    def party(self) -> str:
        return self.customer_name

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> SaleReturnRecord:
        document = _require_mapping(document, "sale return")
        return cls(
            id=as_text(document.get("id")),
            raw_date=document.get("date"),
            items=tuple(
                ReturnLine.from_document(item)
                for item in items_of(document)
                if isinstance(item, Mapping)
            ),
            return_number=as_text(document.get("returnNumber")),
            customer_name=as_text(document.get("customerName")),
        )


SourceRecord = PurchaseRecord | SaleRecord | PurchaseReturnRecord | SaleReturnRecord


def records_from_documents(record_type: type, documents: Iterable[Any]) -> tuple:
    """
    Convert a stored collection, dropping tombstoned (``None``) entries.

    A document that is not record-shaped is skipped and logged; the rest
    of the collection is still converted.
    """
    records = []
    for position, document in enumerate(documents):
        if document is None:
            continue
        try:
            records.append(record_type.from_document(document))
        except MalformedDocumentError as e:
            logger.warning("document_skipped_malformed", extra={
                "document_type": e.document_type,
                "position": position,
                "reason": e.reason,
            })
    return tuple(records)
