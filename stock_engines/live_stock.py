"""
stock_engines.live_stock -- Per-batch stock reconstructed from movements.

Responsibility:
    Fold a product's collected movements into a live stock figure per
    batch, and compare it with the ``stock`` stored on the batch.  The
    stored figure is not the source of truth; the difference between the
    two is reported, not corrected.

Attribution:
    - Each batch starts at its own opening stock.  The first batch whose
      own opening is 0 and which is a default batch (its number is one of
      the default labels, or it is the product's only batch) starts at the
      product's opening stock instead.
    - OPENING movements are already in the seeds and are not re-applied.
    - Other movements go to the first batch that matches, trying in turn:
        1. the movement's batch id (bill and return lines);
        2. for a purchase with an MRP, the batch with the same number and
           an MRP within ``MRP_TOLERANCE``, then any batch with such an MRP;
        3. the batch whose number equals the batch label (trimmed,
           case-insensitive);
        4. the product's first batch.
      With no batches they are unassigned.

Invariants enforced:
    - sum(batch live stock) + unassigned == total
    - total == product opening stock + sum(in - out) over all movements,
      which is the closing balance of an unwindowed cardex.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from stock_engines.movements import Movement, MovementKind
from stock_engines.tracer import traced_engine
from stock_kernel.domain.catalog import Batch, Product
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.live_stock")

DEFAULT_BATCH_LABELS: tuple[str, ...] = ("OPENING", "DEFAULT")

# Purchases priced within this of a batch MRP belong to that batch.
MRP_TOLERANCE = Decimal("0.1")


@dataclass(frozen=True)
class BatchStockPosition:
    batch: Batch
    opening: int
    live_stock: int

    @property
    def stored_stock(self) -> int:
        return self.batch.stock

    @property
    def discrepancy(self) -> int:
        """Live minus stored; non-zero means the stored figure has drifted."""
        return self.live_stock - self.batch.stock


@dataclass(frozen=True)
class ProductStockPosition:
    product: Product
    batches: tuple[BatchStockPosition, ...]
    unassigned: int
    total: int

    def for_batch(self, batch_id: str) -> BatchStockPosition | None:
        for position in self.batches:
            if position.batch.id == batch_id:
                return position
        return None


def _label(value: str) -> str:
    return value.strip().upper()


class LiveStockCalculator:
    """
    Reconstructs live stock per batch.

    Contract:
        Pure functions -- no I/O.  Movements come from
        ``TransactionCollector.collect`` for the same product.
    """

    def __init__(self, default_batch_labels: Sequence[str] = DEFAULT_BATCH_LABELS) -> None:
        self._default_labels = frozenset(_label(label) for label in default_batch_labels)

    def seeds(self, product: Product) -> tuple[list[int], bool]:
        """Starting stock per batch, and whether the product opening was placed."""
        seeds = [batch.opening_stock for batch in product.batches]
        only_batch = len(product.batches) == 1
        for index, batch in enumerate(product.batches):
            if batch.opening_stock == 0 and (
                only_batch or _label(batch.batch_number) in self._default_labels
            ):
                seeds[index] = product.opening_stock
                return seeds, True
        return seeds, False

    def batch_index(self, product: Product, movement: Movement) -> int:
        """Index of the batch a dated movement is attributed to."""
        batches = product.batches
        if movement.batch_id:
            for index, batch in enumerate(batches):
                if batch.id == movement.batch_id:
                    return index

        label = _label(movement.batch_label)
        if movement.mrp is not None:
            priced = [
                index for index, batch in enumerate(batches)
                if abs(batch.mrp - movement.mrp) < MRP_TOLERANCE
            ]
            for index in priced:
                if _label(batches[index].batch_number) == label:
                    return index
            if priced:
                return priced[0]

        for index, batch in enumerate(batches):
            if _label(batch.batch_number) == label:
                return index
        return 0

    @traced_engine("live_stock", "1.1", fingerprint_fields=("product", "movements"))
    def positions(
        self,
        product: Product,
        movements: Iterable[Movement],
    ) -> ProductStockPosition:
        stock, opening_placed = self.seeds(product)
        openings = list(stock)
        unassigned = 0 if opening_placed else product.opening_stock
        total = product.opening_stock
        for movement in movements:
            total += movement.signed_qty
            if movement.kind == MovementKind.OPENING:
                continue
            if not product.batches:
                unassigned += movement.signed_qty
                continue
            stock[self.batch_index(product, movement)] += movement.signed_qty

        positions = tuple(
            BatchStockPosition(batch=batch, opening=opening, live_stock=live)
            for batch, opening, live in zip(product.batches, openings, stock)
        )

        drifted = [p.batch.id for p in positions if p.discrepancy != 0]
        if drifted:
            logger.info("batch_stock_drift", extra={
                "product_id": product.id,
                "batch_ids": drifted,
            })

        return ProductStockPosition(
            product=product,
            batches=positions,
            unassigned=unassigned,
            total=total,
        )
