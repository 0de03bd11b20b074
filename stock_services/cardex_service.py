"""
stock_services.cardex_service -- Per-product stock statement ("cardex").

Responsibility:
    Take a stable snapshot of the four source collections, collect the
    product's movements and build its running-balance statement.  Supplies
    the default upper window bound from the injected Clock so that the
    engines never read time themselves.

Architecture position:
    Services -- thin orchestration over stock_engines.  No persistence:
    callers hand over already-loaded records or raw documents.

Concurrency:
    ``TransactionSources`` holds tuples of frozen records.  Building one
    from caller collections copies them, so a concurrent writer mutating
    its own lists cannot change a statement that is being built.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from stock_config import day_timezone, get_active_config
from stock_config.schema import InventorySettings
from stock_engines.collector import TransactionCollector
from stock_engines.ledger import DateWindow, LedgerBuilder, LedgerStatement
from stock_engines.movements import Movement
from stock_kernel.domain.catalog import Product
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.records import (
    PurchaseRecord,
    PurchaseReturnRecord,
    SaleRecord,
    SaleReturnRecord,
    records_from_documents,
)
from stock_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.cardex")


@dataclass(frozen=True)
class TransactionSources:
    """Immutable snapshot of the four source record collections."""

    purchases: tuple[PurchaseRecord, ...] = ()
    sales: tuple[SaleRecord, ...] = ()
    purchase_returns: tuple[PurchaseReturnRecord, ...] = ()
    sale_returns: tuple[SaleReturnRecord, ...] = ()

    @classmethod
    def snapshot(
        cls,
        purchases: Iterable[PurchaseRecord] = (),
        sales: Iterable[SaleRecord] = (),
        purchase_returns: Iterable[PurchaseReturnRecord] = (),
        sale_returns: Iterable[SaleReturnRecord] = (),
    ) -> TransactionSources:
        """Freeze already-typed records, dropping tombstones."""
        return cls(
            purchases=tuple(r for r in purchases if r is not None),
            sales=tuple(r for r in sales if r is not None),
            purchase_returns=tuple(r for r in purchase_returns if r is not None),
            sale_returns=tuple(r for r in sale_returns if r is not None),
        )

    @classmethod
    def from_documents(
        cls,
        purchases: Iterable[Mapping[str, Any] | None] = (),
        sales: Iterable[Mapping[str, Any] | None] = (),
        purchase_returns: Iterable[Mapping[str, Any] | None] = (),
        sale_returns: Iterable[Mapping[str, Any] | None] = (),
    ) -> TransactionSources:
        """Convert stored documents into a snapshot."""
        return cls(
            purchases=records_from_documents(PurchaseRecord, purchases),
            sales=records_from_documents(SaleRecord, sales),
            purchase_returns=records_from_documents(PurchaseReturnRecord, purchase_returns),
            sale_returns=records_from_documents(SaleReturnRecord, sale_returns),
        )


class CardexService:
    """
    Builds stock statements.

    Contract:
        Receives the Clock and settings via constructor injection.  Each
        call is idempotent and side-effect free apart from logging.
        Days start at midnight in the settings' ``timezone``.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        settings: InventorySettings | None = None,
        collector: TransactionCollector | None = None,
        ledger: LedgerBuilder | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_config()
        self._tz = day_timezone(self._settings)
        self._collector = collector or TransactionCollector(tz=self._tz)
        self._ledger = ledger or LedgerBuilder()

    def movements(self, product: Product, sources: TransactionSources) -> list[Movement]:
        return self._collector.collect(
            product=product,
            purchases=sources.purchases,
            sales=sources.sales,
            purchase_returns=sources.purchase_returns,
            sale_returns=sources.sale_returns,
        )

    def build_cardex(
        self,
        product: Product,
        sources: TransactionSources,
        window: DateWindow | None = None,
    ) -> LedgerStatement:
        """Statement for ``product`` over ``window`` (end defaults to today)."""
        window = window or DateWindow()
        if window.end is None:
            window = window.with_end(self._clock.today(self._tz))

        with LogContext.bind(product_id=product.id, view="cardex"):
            movements = self.movements(product, sources)
            statement = self._ledger.build(
                product=product, movements=movements, window=window,
            )
            logger.info("cardex_served", extra={
                "movement_count": len(movements),
                "row_count": len(statement.rows),
            })
        return statement


def build_cardex(
    product: Product,
    sources: TransactionSources,
    window: DateWindow | None = None,
    clock: Clock | None = None,
) -> LedgerStatement:
    """Module-level shortcut for ``CardexService(clock).build_cardex``."""
    return CardexService(clock=clock).build_cardex(product, sources, window)
