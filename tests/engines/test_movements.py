"""Tests for the Movement value object."""

from datetime import datetime

import pytest

from stock_engines.movements import Movement, MovementKind
from stock_kernel.domain.dates import BEGINNING_OF_TIME


class TestMovement:
    """Single-sided movement invariants."""

    def test_opening(self):
        movement = Movement.opening(100, "B1")
        assert movement.date == BEGINNING_OF_TIME
        assert movement.signed_qty == 100

    def test_outbound_signed_negative(self):
        movement = Movement.outbound(MovementKind.SALE, datetime(2024, 1, 1), 30)
        assert movement.signed_qty == -30

    @pytest.mark.parametrize("kind, expected", [
        (MovementKind.OPENING, True),
        (MovementKind.PURCHASE, True),
        (MovementKind.SALE_RETURN, True),
        (MovementKind.SALE, False),
        (MovementKind.PURCHASE_RETURN, False),
    ])
    def test_direction(self, kind, expected):
        assert kind.is_inbound is expected

    def test_both_sides_rejected(self):
        with pytest.raises(ValueError):
            Movement(datetime(2024, 1, 1), MovementKind.PURCHASE, in_qty=5, out_qty=1)

    def test_wrong_side_rejected(self):
        with pytest.raises(ValueError):
            Movement.inbound(MovementKind.SALE, datetime(2024, 1, 1), 5)

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValueError):
            Movement.opening(0, "B1")

    def test_batch_hints_default_to_none(self):
        movement = Movement.inbound(MovementKind.PURCHASE, datetime(2024, 1, 1), 5)
        assert movement.batch_id is None
        assert movement.mrp is None

    def test_batch_hints_kept(self):
        movement = Movement.outbound(
            MovementKind.SALE, datetime(2024, 1, 1), 5, batch_label="A2", batch_id="b2",
        )
        assert (movement.batch_label, movement.batch_id) == ("A2", "b2")
