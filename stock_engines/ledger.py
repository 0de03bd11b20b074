"""
stock_engines.ledger -- Running-balance stock statement ("cardex").

Responsibility:
    Sort a product's movements chronologically, compute the balance
    carried into a date window, and fold the movements inside the window
    into statement rows with a running balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The window's upper bound
    is an explicit parameter; this module never reads the clock.

Algorithm:
    1. Stable sort: OPENING movements first (input order), then ascending
       by date with ties kept in input order.
    2. Window opening balance: the product's own ``opening_stock`` plus,
       when the window has a start, every movement dated before the start
       and every OPENING movement.
    3. Rows: every movement with (date >= start, or kind OPENING) and
       date <= end, each carrying the balance after it.

    OPENING movements are always listed as the first rows so that a
    windowed statement still shows each batch's starting position.  With
    a start date they are therefore also part of the carried balance;
    that dual treatment is kept deliberately (see DESIGN.md).

Invariants enforced:
    - closing_balance == opening_balance + sum(in - out) over the rows.
    - Bounds are whole days: start is truncated to start-of-day, end to
      end-of-day; both are inclusive.
    - Identical inputs give identical statements.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from stock_engines.movements import Movement, MovementKind
from stock_engines.tracer import traced_engine
from stock_kernel.domain.catalog import Product
from stock_kernel.domain.dates import BEGINNING_OF_TIME, end_of_day, start_of_day
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.ledger")


@dataclass(frozen=True)
class DateWindow:
    """Inclusive whole-day window; either bound may be open."""

    start: date | None = None
    end: date | None = None

    @property
    def start_instant(self) -> datetime | None:
        return start_of_day(self.start) if self.start is not None else None

    @property
    def end_instant(self) -> datetime | None:
        return end_of_day(self.end) if self.end is not None else None

    def with_end(self, end: date) -> DateWindow:
        return DateWindow(start=self.start, end=end)


@dataclass(frozen=True)
class StatementRow:
    """One line of the stock statement."""

    date: datetime
    kind: MovementKind
    label: str
    in_qty: int
    out_qty: int
    balance_after: int
    reference: str = ""
    party: str = ""

    @property
    def is_opening(self) -> bool:
        return self.kind == MovementKind.OPENING


@dataclass(frozen=True)
class LedgerStatement:
    """Running-balance statement for one product over a window."""

    product_id: str
    window: DateWindow
    opening_balance: int
    rows: tuple[StatementRow, ...]
    closing_balance: int

    @property
    def total_in(self) -> int:
        return sum(row.in_qty for row in self.rows)

    @property
    def total_out(self) -> int:
        return sum(row.out_qty for row in self.rows)


def _sort_key(movement: Movement) -> tuple[int, datetime]:
    if movement.kind == MovementKind.OPENING:
        return (0, BEGINNING_OF_TIME)
    return (1, movement.date)


class LedgerBuilder:
    """
    Builds cardex statements from collected movements.

    Contract:
        Pure functions -- no I/O, no clock access.
    Guarantees:
        - ``sort_movements`` is stable.
        - ``build`` with an empty movement list returns no rows and a
          closing balance equal to the opening balance.
    """

    def sort_movements(self, movements: Iterable[Movement]) -> list[Movement]:
        return sorted(movements, key=_sort_key)

    def opening_balance(
        self,
        base_opening: int,
        movements: Iterable[Movement],
        window: DateWindow,
    ) -> int:
        """Balance carried into the window."""
        start = window.start_instant
        balance = base_opening
        if start is None:
            return balance
        for movement in movements:
            if movement.kind == MovementKind.OPENING or movement.date < start:
                balance += movement.signed_qty
        return balance

    def in_window(self, movement: Movement, window: DateWindow) -> bool:
        start = window.start_instant
        end = window.end_instant
        after_start = (
            start is None
            or movement.kind == MovementKind.OPENING
            or movement.date >= start
        )
        before_end = end is None or movement.date <= end
        return after_start and before_end

    @traced_engine("ledger", "1.1", fingerprint_fields=("product", "movements", "window"))
    def build(
        self,
        product: Product,
        movements: Iterable[Movement],
        window: DateWindow | None = None,
    ) -> LedgerStatement:
        window = window or DateWindow()
        ordered = self.sort_movements(movements)

        opening = self.opening_balance(product.opening_stock, ordered, window)
        running = opening
        rows: list[StatementRow] = []
        for movement in ordered:
            if not self.in_window(movement, window):
                continue
            running += movement.signed_qty
            rows.append(StatementRow(
                date=movement.date,
                kind=movement.kind,
                label=movement.batch_label,
                in_qty=movement.in_qty,
                out_qty=movement.out_qty,
                balance_after=running,
                reference=movement.reference,
                party=movement.party,
            ))

        logger.info("cardex_built", extra={
            "product_id": product.id,
            "window_start": window.start,
            "window_end": window.end,
            "opening_balance": opening,
            "row_count": len(rows),
            "closing_balance": running,
        })

        return LedgerStatement(
            product_id=product.id,
            window=window,
            opening_balance=opening,
            rows=tuple(rows),
            closing_balance=running,
        )
