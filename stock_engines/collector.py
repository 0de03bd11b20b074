"""
stock_engines.collector -- Gather every stock movement for one product.

Responsibility:
    Scan the product's own batches plus the four source record families
    and emit a flat, unsorted list of Movements in atomic units:

    - OPENING          one per batch with opening stock > 0, dated at the
                       beginning-of-time sentinel.
    - PURCHASE         purchase lines accepted by the ProductMatcher,
                       packs x pack size, dated at the invoice date.
    - SALE             bill lines whose product_id is the product's id,
                       already atomic, dated at the bill date.
    - PURCHASE_RETURN  return lines by product_id, packs x pack size.
    - SALE_RETURN      return lines by product_id, already atomic.

    The pack size is the line's own ``units_per_strip`` when set, else
    the product's.  Sorting is the ledger's job.

    Each movement also carries the line's batch id and, for purchases,
    its MRP; live batch stock uses them to pick the batch.

    Dates with an offset are read in the collector's zone (UTC unless one
    is given), so a bill keeps the calendar day it was made on.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    None raised.  A record whose date cannot be parsed is skipped and
    logged; other records are still collected.  Lines with a
    non-positive quantity carry no movement and are skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Any

from stock_engines.matching import ProductMatcher
from stock_engines.movements import Movement, MovementKind
from stock_engines.tracer import traced_engine
from stock_engines.units import to_atomic_units
from stock_kernel.domain.catalog import Product
from stock_kernel.domain.dates import parse_instant
from stock_kernel.domain.records import (
    PurchaseRecord,
    PurchaseReturnRecord,
    SaleRecord,
    SaleReturnRecord,
    SourceRecord,
)
from stock_kernel.exceptions import MalformedDateError
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.collector")


class TransactionCollector:
    """
    Normalises heterogeneous source records into Movements.

    Contract:
        Pure function over its inputs; records are never mutated.
    Guarantees:
        - Output order is: openings (batch order), purchases, sales,
          purchase returns, sale returns, each in input order.
        - A malformed date drops only the record that carries it.
    """

    def __init__(
        self,
        matcher: ProductMatcher | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._matcher = matcher or ProductMatcher()
        self._tz = tz

    @traced_engine("collector", "1.1", fingerprint_fields=(
        "product", "purchases", "sales", "purchase_returns", "sale_returns",
    ))
    def collect(
        self,
        product: Product,
        purchases: Sequence[PurchaseRecord] = (),
        sales: Sequence[SaleRecord] = (),
        purchase_returns: Sequence[PurchaseReturnRecord] = (),
        sale_returns: Sequence[SaleReturnRecord] = (),
    ) -> list[Movement]:
        movements: list[Movement] = []
        movements.extend(self.opening_movements(product))

        def by_id(line: Any) -> bool:
            return bool(line.product_id) and line.product_id == product.id

        def purchase_match(line: Any) -> bool:
            return self._matcher.matches(product, line)

        movements.extend(self._from_records(
            purchases, purchase_match, MovementKind.PURCHASE, product, packs=True,
        ))
        movements.extend(self._from_records(
            sales, by_id, MovementKind.SALE, product, packs=False,
        ))
        movements.extend(self._from_records(
            purchase_returns, by_id, MovementKind.PURCHASE_RETURN, product, packs=True,
        ))
        movements.extend(self._from_records(
            sale_returns, by_id, MovementKind.SALE_RETURN, product, packs=False,
        ))

        logger.info("movements_collected", extra={
            "product_id": product.id,
            "movement_count": len(movements),
        })
        return movements

    def opening_movements(self, product: Product) -> list[Movement]:
        return [
            Movement.opening(batch.opening_stock, batch.batch_number)
            for batch in product.batches
            if batch.opening_stock > 0
        ]

    def _from_records(
        self,
        records: Iterable[SourceRecord],
        is_relevant: Callable[[Any], bool],
        kind: MovementKind,
        product: Product,
        packs: bool,
    ) -> list[Movement]:
        movements: list[Movement] = []
        for record in records:
            if record is None:
                continue
            lines = [line for line in record.items if is_relevant(line)]
            if not lines:
                continue

            when = self._record_date(record, kind)
            if when is None:
                continue

            for line in lines:
                quantity = line.quantity
                if packs:
                    quantity = to_atomic_units(
                        quantity, line.units_per_strip or product.units_per_strip
                    )
                if quantity <= 0:
                    logger.debug("line_skipped_non_positive_quantity", extra={
                        "product_id": product.id,
                        "kind": kind.value,
                        "reference": record.reference,
                        "quantity": quantity,
                    })
                    continue

                build = Movement.inbound if kind.is_inbound else Movement.outbound
                movements.append(build(
                    kind,
                    when,
                    quantity,
                    batch_label=line.batch_number,
                    reference=record.reference,
                    party=record.party,
                    batch_id=getattr(line, "batch_id", None),
                    mrp=_purchase_mrp(line) if kind == MovementKind.PURCHASE else None,
                ))
        return movements

    def _record_date(self, record: SourceRecord, kind: MovementKind) -> datetime | None:
        try:
            return parse_instant(record.raw_date, tz=self._tz)
        except MalformedDateError as e:
            logger.warning("movement_skipped_malformed_date", extra={
                "kind": kind.value,
                "record_id": record.id,
                "reference": record.reference,
                "raw_date": str(e.value),
            })
            return None


def _purchase_mrp(line: Any) -> Decimal | None:
    return line.mrp if line.mrp > 0 else None
