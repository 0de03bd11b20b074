"""Pure domain layer: value objects, records and time abstraction."""

from stock_kernel.domain.catalog import Batch, Product, products_from_documents
from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.records import (
    PurchaseLine,
    PurchaseRecord,
    PurchaseReturnRecord,
    ReturnLine,
    SaleLine,
    SaleRecord,
    SaleReturnRecord,
    SourceRecord,
    records_from_documents,
)
from stock_kernel.domain.values import Currency, Money

__all__ = [
    "Batch",
    "Clock",
    "Currency",
    "DeterministicClock",
    "Money",
    "Product",
    "PurchaseLine",
    "PurchaseRecord",
    "PurchaseReturnRecord",
    "ReturnLine",
    "SaleLine",
    "SaleRecord",
    "SaleReturnRecord",
    "SourceRecord",
    "SystemClock",
    "products_from_documents",
    "records_from_documents",
]
