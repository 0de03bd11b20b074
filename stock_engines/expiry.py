"""
stock_engines.expiry -- Expired and near-expiry stock.

Responsibility:
    Classify batches by expiry relative to an explicit as-of date and
    list the ones still holding live stock, valued at purchase cost.

Rules:
    - Expiry is stored as ``YYYY-MM`` and means the last day of that month.
    - No expiry means "never expires" (a far-future sentinel date).
    - An expiry that cannot be parsed is unclassifiable; such batches are
      left out of the report and logged.
    - EXPIRED: expiry < as_of.  NEAR_EXPIRY: as_of <= expiry <=
      as_of + near_expiry_days.  Everything else is OK.
    - Only batches with positive live stock are reported.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock access.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from stock_engines.live_stock import ProductStockPosition
from stock_engines.tracer import traced_engine
from stock_engines.units import unit_cost
from stock_kernel.domain.catalog import Batch
from stock_kernel.domain.dates import parse_year_month
from stock_kernel.domain.values import Currency, Money
from stock_kernel.exceptions import MalformedDateError
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.expiry")

NEVER_EXPIRES = date(9999, 12, 31)


class ExpiryStatus(str, Enum):
    EXPIRED = "expired"
    NEAR_EXPIRY = "near_expiry"
    OK = "ok"


@dataclass(frozen=True)
class ExpiryLine:
    product_id: str
    product_name: str
    batch_id: str
    batch_number: str
    expires_on: date
    status: ExpiryStatus
    live_stock: int
    value: Money


@dataclass(frozen=True)
class ExpiryReport:
    as_of: date
    expired: tuple[ExpiryLine, ...]
    near_expiry: tuple[ExpiryLine, ...]

    @property
    def expired_value(self) -> Decimal:
        return sum((line.value.amount for line in self.expired), Decimal("0"))

    @property
    def near_expiry_value(self) -> Decimal:
        return sum((line.value.amount for line in self.near_expiry), Decimal("0"))


class ExpiryClassifier:
    """
    Classifies batches by expiry.

    Contract:
        Pure functions -- the as-of date is always passed in.
    """

    def __init__(
        self,
        near_expiry_days: int = 90,
        never_expires: date = NEVER_EXPIRES,
        currency: str | Currency = "INR",
    ) -> None:
        self._near_expiry_days = near_expiry_days
        self._never_expires = never_expires
        self._currency = Currency(currency) if isinstance(currency, str) else currency

    def expires_on(self, batch: Batch) -> date | None:
        """Expiry date of a batch, or None when it cannot be parsed."""
        if not batch.expiry_date:
            return self._never_expires
        try:
            return parse_year_month(batch.expiry_date)
        except MalformedDateError:
            logger.warning("batch_expiry_unparseable", extra={
                "batch_id": batch.id,
                "expiry_date": batch.expiry_date,
            })
            return None

    def classify(self, expires_on: date, as_of: date) -> ExpiryStatus:
        if expires_on < as_of:
            return ExpiryStatus.EXPIRED
        if expires_on <= as_of + timedelta(days=self._near_expiry_days):
            return ExpiryStatus.NEAR_EXPIRY
        return ExpiryStatus.OK

    @traced_engine("expiry", "1.1", fingerprint_fields=("positions", "as_of"))
    def report(
        self,
        positions: Iterable[ProductStockPosition],
        as_of: date,
    ) -> ExpiryReport:
        expired: list[ExpiryLine] = []
        near: list[ExpiryLine] = []
        for position in positions:
            product = position.product
            for batch_position in position.batches:
                if batch_position.live_stock <= 0:
                    continue
                batch = batch_position.batch
                expires_on = self.expires_on(batch)
                if expires_on is None:
                    continue
                status = self.classify(expires_on, as_of)
                if status == ExpiryStatus.OK:
                    continue
                cost = unit_cost(batch, product.units_per_strip)
                line = ExpiryLine(
                    product_id=product.id,
                    product_name=product.name,
                    batch_id=batch.id,
                    batch_number=batch.batch_number,
                    expires_on=expires_on,
                    status=status,
                    live_stock=batch_position.live_stock,
                    value=Money(
                        amount=Decimal(batch_position.live_stock) * cost,
                        currency=self._currency,
                    ),
                )
                (expired if status == ExpiryStatus.EXPIRED else near).append(line)

        logger.info("expiry_report_built", extra={
            "as_of": as_of,
            "expired_count": len(expired),
            "near_expiry_count": len(near),
        })
        return ExpiryReport(as_of=as_of, expired=tuple(expired), near_expiry=tuple(near))
