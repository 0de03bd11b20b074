"""
stock_engines.units -- Pack/unit conversion and stock display.

Stock is counted in atomic units (tablets).  A pack ("strip") holds
``units_per_strip`` atomic units.  Unset or non-positive pack sizes mean
one unit per pack, so no strip/unit split and no division by zero.

Negative quantities are an expected state (over-sale) and are formatted
with a leading minus sign, never clamped.
"""

from __future__ import annotations

from decimal import Decimal

from stock_kernel.domain.catalog import Batch


def pack_size(units_per_strip: int | None) -> int:
    """Pack size usable as a divisor: unset or non-positive becomes 1."""
    if not units_per_strip or units_per_strip < 1:
        return 1
    return int(units_per_strip)


def to_atomic_units(packs: int, units_per_strip: int | None) -> int:
    return packs * pack_size(units_per_strip)


def format_quantity(quantity: int, units_per_strip: int | None) -> str:
    """
    Render an atomic quantity as packs and loose units.

    >>> format_quantity(25, 10)
    '2 S + 5 U'
    >>> format_quantity(20, 10)
    '2 S'
    >>> format_quantity(-5, 10)
    '-5 U'
    >>> format_quantity(5, 1)
    '5 U'
    """
    if quantity == 0:
        return "0 U"
    if not units_per_strip or units_per_strip <= 1:
        return f"{quantity} U"

    strips, loose = divmod(abs(quantity), units_per_strip)
    if loose == 0:
        text = f"{strips} S"
    elif strips == 0:
        text = f"{loose} U"
    else:
        text = f"{strips} S + {loose} U"
    return f"-{text}" if quantity < 0 else text


def unit_cost(batch: Batch, units_per_strip: int | None) -> Decimal:
    """Purchase cost of one atomic unit (purchase price is per pack)."""
    return batch.purchase_price / Decimal(pack_size(units_per_strip))
