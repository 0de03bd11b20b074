"""
stock_engines.valuation -- Monetary value of current batch stock.

Responsibility:
    Value stock at purchase cost from the batches' current ``stock``
    figures (not from the reconstructed ledger):

        batch value     = batch.stock x unit cost
        product value   = sum of its batch values
        portfolio value = sum over non-null products, optionally filtered

    Company totals group product values by company, highest value first.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic; values are Money in the configured currency.
    - Negative stock (over-sale) yields a negative value.  It is never
      clamped, so that shortfalls surface in totals.
    - Tombstoned (``None``) products are skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from stock_engines.tracer import traced_engine
from stock_engines.units import unit_cost
from stock_kernel.domain.catalog import Batch, Product
from stock_kernel.domain.values import Currency, Money
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.valuation")

ProductPredicate = Callable[[Product], bool]


@dataclass(frozen=True)
class BatchValuation:
    batch_id: str
    batch_number: str
    stock: int
    unit_cost: Decimal
    value: Money


@dataclass(frozen=True)
class ProductValuation:
    product_id: str
    name: str
    company: str
    stock: int
    batches: tuple[BatchValuation, ...]
    value: Money


@dataclass(frozen=True)
class PortfolioValuation:
    rows: tuple[ProductValuation, ...]
    total: Money

    @property
    def product_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class CompanyValuation:
    company: str
    product_count: int
    stock: int
    value: Money


class ValuationEngine:
    """
    Values products at purchase cost.

    Contract:
        Pure functions -- no I/O.  The currency is fixed per engine.
    Guarantees:
        - ``portfolio_valuation(...).total`` equals the sum of its rows.
        - An empty or fully filtered portfolio totals zero.
    """

    def __init__(self, currency: str | Currency = "INR") -> None:
        self._currency = Currency(currency) if isinstance(currency, str) else currency

    @property
    def currency(self) -> Currency:
        return self._currency

    def batch_valuation(self, batch: Batch, units_per_strip: int | None) -> BatchValuation:
        cost = unit_cost(batch, units_per_strip)
        return BatchValuation(
            batch_id=batch.id,
            batch_number=batch.batch_number,
            stock=batch.stock,
            unit_cost=cost,
            value=Money(amount=Decimal(batch.stock) * cost, currency=self._currency),
        )

    def product_valuation(self, product: Product) -> ProductValuation:
        batches = tuple(
            self.batch_valuation(batch, product.units_per_strip)
            for batch in product.batches
        )
        value = Money.zero(self._currency)
        for batch_value in batches:
            value = value + batch_value.value
        return ProductValuation(
            product_id=product.id,
            name=product.name,
            company=product.company,
            stock=sum(b.stock for b in batches),
            batches=batches,
            value=value,
        )

    @traced_engine("valuation", "1.1", fingerprint_fields=("products",))
    def portfolio_valuation(
        self,
        products: Iterable[Product | None],
        predicate: ProductPredicate | None = None,
    ) -> PortfolioValuation:
        rows: list[ProductValuation] = []
        total = Money.zero(self._currency)
        skipped = 0
        for product in products:
            if product is None:
                skipped += 1
                continue
            if predicate is not None and not predicate(product):
                continue
            row = self.product_valuation(product)
            rows.append(row)
            total = total + row.value

        logger.info("portfolio_valued", extra={
            "product_count": len(rows),
            "tombstones_skipped": skipped,
            "total": total.amount,
            "currency": self._currency.code,
        })
        return PortfolioValuation(rows=tuple(rows), total=total)

    def company_valuation(
        self,
        products: Iterable[Product | None],
        predicate: ProductPredicate | None = None,
    ) -> tuple[CompanyValuation, ...]:
        portfolio = self.portfolio_valuation(products, predicate)
        grouped: dict[str, list[ProductValuation]] = {}
        for row in portfolio.rows:
            grouped.setdefault(row.company, []).append(row)

        companies = []
        for company, rows in grouped.items():
            value = Money.zero(self._currency)
            for row in rows:
                value = value + row.value
            companies.append(CompanyValuation(
                company=company,
                product_count=len(rows),
                stock=sum(row.stock for row in rows),
                value=value,
            ))
        return tuple(sorted(companies, key=lambda c: (-c.value.amount, c.company)))
