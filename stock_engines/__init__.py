"""
Module: stock_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for stock_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel (and sibling engine modules).
    MUST NOT import stock_services or stock_config.

Invariants enforced:
    - Purity: engines never call ``datetime.now()`` or ``date.today()``.
      Window bounds and as-of dates are explicit parameters; services
      supply them from an injected Clock.
    - Decimal-only arithmetic for money.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from stock_engines import LedgerBuilder, TransactionCollector, DateWindow

    movements = TransactionCollector().collect(
        product=product, purchases=purchases, sales=sales,
    )
    statement = LedgerBuilder().build(
        product=product, movements=movements, window=DateWindow(end=as_of),
    )
"""

from stock_kernel.logging_config import get_logger

logger = get_logger("engines")

from stock_engines.collector import TransactionCollector
from stock_engines.expiry import (
    ExpiryClassifier,
    ExpiryLine,
    ExpiryReport,
    ExpiryStatus,
)
from stock_engines.ledger import (
    DateWindow,
    LedgerBuilder,
    LedgerStatement,
    StatementRow,
)
from stock_engines.live_stock import (
    BatchStockPosition,
    LiveStockCalculator,
    ProductStockPosition,
)
from stock_engines.matching import (
    MatchRule,
    ProductMatcher,
    normalize_code,
    product_filter,
)
from stock_engines.movements import Movement, MovementKind
from stock_engines.tracer import traced_engine
from stock_engines.units import format_quantity, pack_size, to_atomic_units, unit_cost
from stock_engines.valuation import (
    BatchValuation,
    CompanyValuation,
    PortfolioValuation,
    ProductValuation,
    ValuationEngine,
)

__all__ = [
    "BatchStockPosition",
    "BatchValuation",
    "CompanyValuation",
    "DateWindow",
    "ExpiryClassifier",
    "ExpiryLine",
    "ExpiryReport",
    "ExpiryStatus",
    "LedgerBuilder",
    "LedgerStatement",
    "LiveStockCalculator",
    "MatchRule",
    "Movement",
    "MovementKind",
    "PortfolioValuation",
    "ProductMatcher",
    "ProductStockPosition",
    "ProductValuation",
    "StatementRow",
    "TransactionCollector",
    "ValuationEngine",
    "format_quantity",
    "normalize_code",
    "pack_size",
    "product_filter",
    "to_atomic_units",
    "traced_engine",
    "unit_cost",
]
