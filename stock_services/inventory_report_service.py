"""
stock_services.inventory_report_service -- Stock views across products.

Responsibility:
    Back the all-stock, company-wise, batch and expiry views: value the
    portfolio, summarise live stock per product, reconstruct per-batch
    stock and list expired or soon-expiring batches.  Settings come from
    ``stock_config``; the as-of date for expiry is the Clock's date in
    the configured business-day zone.

Architecture position:
    Services -- orchestration over stock_engines.  Tombstoned (``None``)
    products are skipped in every view.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from stock_config import day_timezone, get_active_config
from stock_config.schema import InventorySettings
from stock_engines.collector import TransactionCollector
from stock_engines.expiry import ExpiryClassifier, ExpiryReport
from stock_engines.live_stock import LiveStockCalculator, ProductStockPosition
from stock_engines.units import format_quantity, pack_size
from stock_engines.valuation import (
    CompanyValuation,
    PortfolioValuation,
    ProductPredicate,
    ValuationEngine,
)
from stock_kernel.domain.catalog import Product
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.values import Money
from stock_kernel.logging_config import LogContext, get_logger
from stock_services.cardex_service import TransactionSources

logger = get_logger("services.inventory_report")


@dataclass(frozen=True)
class StockSummaryRow:
    product: Product
    live_stock: int
    display: str
    is_low_stock: bool
    value: Money


class InventoryReportService:
    """
    Inventory views over a product collection.

    Contract:
        Receives settings and Clock via constructor injection; when no
        settings are given the shipped defaults are loaded.
    """

    def __init__(
        self,
        settings: InventorySettings | None = None,
        clock: Clock | None = None,
        collector: TransactionCollector | None = None,
    ) -> None:
        self._settings = settings or get_active_config()
        self._clock = clock or SystemClock()
        self._tz = day_timezone(self._settings)
        self._collector = collector or TransactionCollector(tz=self._tz)
        self._valuation = ValuationEngine(currency=self._settings.currency)
        self._live_stock = LiveStockCalculator(self._settings.default_batch_labels)
        self._expiry = ExpiryClassifier(
            near_expiry_days=self._settings.near_expiry_days,
            never_expires=self._settings.never_expires,
            currency=self._settings.currency,
        )

    @property
    def settings(self) -> InventorySettings:
        return self._settings

    def valuate_products(
        self,
        products: Iterable[Product | None],
        predicate: ProductPredicate | None = None,
    ) -> PortfolioValuation:
        with LogContext.bind(view="valuation"):
            return self._valuation.portfolio_valuation(tuple(products), predicate)

    def company_valuation(
        self,
        products: Iterable[Product | None],
        predicate: ProductPredicate | None = None,
    ) -> tuple[CompanyValuation, ...]:
        with LogContext.bind(view="company_valuation"):
            return self._valuation.company_valuation(tuple(products), predicate)

    def batch_positions(
        self,
        products: Iterable[Product | None],
        sources: TransactionSources,
    ) -> tuple[ProductStockPosition, ...]:
        positions = []
        for product in tuple(products):
            if product is None:
                continue
            with LogContext.bind(product_id=product.id):
                movements = self._collector.collect(
                    product=product,
                    purchases=sources.purchases,
                    sales=sources.sales,
                    purchase_returns=sources.purchase_returns,
                    sale_returns=sources.sale_returns,
                )
                positions.append(self._live_stock.positions(product, movements))
        return tuple(positions)

    def is_low_stock(self, product: Product, live_stock: int) -> bool:
        return live_stock <= self._settings.low_stock_strips * pack_size(product.units_per_strip)

    def stock_summary(
        self,
        products: Iterable[Product | None],
        sources: TransactionSources,
        predicate: ProductPredicate | None = None,
    ) -> tuple[StockSummaryRow, ...]:
        """Live stock and value per product, highest value first."""
        selected = [
            p for p in tuple(products)
            if p is not None and (predicate is None or predicate(p))
        ]
        rows = []
        with LogContext.bind(view="stock_summary"):
            for position in self.batch_positions(selected, sources):
                product = position.product
                rows.append(StockSummaryRow(
                    product=product,
                    live_stock=position.total,
                    display=format_quantity(position.total, product.units_per_strip),
                    is_low_stock=self.is_low_stock(product, position.total),
                    value=self._valuation.product_valuation(product).value,
                ))

            logger.info("stock_summary_built", extra={
                "product_count": len(rows),
                "low_stock_count": sum(1 for r in rows if r.is_low_stock),
            })
        return tuple(sorted(rows, key=lambda r: (-r.value.amount, r.product.name)))

    def expiry_report(
        self,
        products: Iterable[Product | None],
        sources: TransactionSources,
        as_of: date | None = None,
    ) -> ExpiryReport:
        """Expired and near-expiry batches as of ``as_of`` (default: today)."""
        as_of = as_of or self._clock.today(self._tz)
        with LogContext.bind(view="expiry"):
            return self._expiry.report(
                positions=self.batch_positions(products, sources), as_of=as_of,
            )


def valuate_products(
    products: Iterable[Product | None],
    predicate: ProductPredicate | None = None,
    currency: str = "INR",
) -> PortfolioValuation:
    """Module-level shortcut: value products at purchase cost."""
    return ValuationEngine(currency=currency).portfolio_valuation(tuple(products), predicate)
