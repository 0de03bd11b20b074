"""
stock_services -- façade used by the presentation layer.

    build_cardex(product, sources, window) -> LedgerStatement
    valuate_products(products, predicate) -> PortfolioValuation (rows, total)
    format_quantity(qty, units_per_strip) -> str

plus ``CardexService`` and ``InventoryReportService`` for callers that
inject their own clock or settings.
"""

from stock_engines.ledger import DateWindow
from stock_engines.matching import product_filter
from stock_engines.units import format_quantity
from stock_services.cardex_service import (
    CardexService,
    TransactionSources,
    build_cardex,
)
from stock_services.inventory_report_service import (
    InventoryReportService,
    StockSummaryRow,
    valuate_products,
)

__all__ = [
    "CardexService",
    "DateWindow",
    "InventoryReportService",
    "StockSummaryRow",
    "TransactionSources",
    "build_cardex",
    "format_quantity",
    "product_filter",
    "valuate_products",
]
