"""
stock_engines.movements -- The normalised stock movement.

A Movement is derived, read-only and never persisted: it lives for the
duration of one ledger build.  Every record family is converted into this
one shape at collection time so that sorting and folding see a single
stable type.

Invariants enforced:
    - Single-sided: OPENING, PURCHASE and SALE_RETURN carry only
      ``in_qty``; SALE and PURCHASE_RETURN carry only ``out_qty``.
    - The carried side is strictly positive.

``batch_id`` and ``mrp`` are batch hints used by live batch stock only:
the bill line's resolved batch, and the purchase line's MRP.  The
statement ignores them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stock_kernel.domain.dates import BEGINNING_OF_TIME


class MovementKind(str, Enum):
    """Kind of stock movement."""

    OPENING = "opening"
    PURCHASE = "purchase"
    SALE = "sale"
    PURCHASE_RETURN = "purchase_return"
    SALE_RETURN = "sale_return"

    @property
    def is_inbound(self) -> bool:
        return self in _INBOUND_KINDS


_INBOUND_KINDS = frozenset({
    MovementKind.OPENING,
    MovementKind.PURCHASE,
    MovementKind.SALE_RETURN,
})


@dataclass(frozen=True)
class Movement:
    """A single in/out stock event in atomic units."""

    date: datetime
    kind: MovementKind
    batch_label: str = ""
    in_qty: int = 0
    out_qty: int = 0
    reference: str = ""
    party: str = ""
    batch_id: str | None = None
    mrp: Decimal | None = None

    def __post_init__(self) -> None:
        if self.kind.is_inbound:
            if self.out_qty != 0 or self.in_qty <= 0:
                raise ValueError(
                    f"{self.kind.value} movement must carry a positive in_qty only"
                )
        elif self.in_qty != 0 or self.out_qty <= 0:
            raise ValueError(
                f"{self.kind.value} movement must carry a positive out_qty only"
            )

    @property
    def signed_qty(self) -> int:
        """Effect on stock: positive for inbound, negative for outbound."""
        return self.in_qty - self.out_qty

    @classmethod
    def opening(cls, quantity: int, batch_label: str) -> Movement:
        return cls(
            date=BEGINNING_OF_TIME,
            kind=MovementKind.OPENING,
            batch_label=batch_label,
            in_qty=quantity,
        )

    @classmethod
    def inbound(
        cls,
        kind: MovementKind,
        date: datetime,
        quantity: int,
        batch_label: str = "",
        reference: str = "",
        party: str = "",
        batch_id: str | None = None,
        mrp: Decimal | None = None,
    ) -> Movement:
        return cls(
            date=date, kind=kind, batch_label=batch_label, in_qty=quantity,
            reference=reference, party=party, batch_id=batch_id, mrp=mrp,
        )

    @classmethod
    def outbound(
        cls,
        kind: MovementKind,
        date: datetime,
        quantity: int,
        batch_label: str = "",
        reference: str = "",
        party: str = "",
        batch_id: str | None = None,
        mrp: Decimal | None = None,
    ) -> Movement:
        return cls(
            date=date, kind=kind, batch_label=batch_label, out_qty=quantity,
            reference=reference, party=party, batch_id=batch_id, mrp=mrp,
        )
