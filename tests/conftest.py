"""
Pytest fixtures for the stock ledger test suite.

Engines are pure, so nothing here touches a database: fixtures build
products and records in memory and pin time with a DeterministicClock.
"""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO

import pytest

from stock_kernel.domain.catalog import Batch, Product
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.records import (
    PurchaseLine,
    PurchaseRecord,
    ReturnLine,
    SaleLine,
    SaleRecord,
    SaleReturnRecord,
)
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            TransactionCollector().collect(product=product, sales=sales)
            logs = captured_logs()
            assert any(r["message"] == "movements_collected" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(datetime(2024, 6, 30, 9, 0, tzinfo=UTC))


# =============================================================================
# Scenario: one strip product, one opening batch
# =============================================================================


@pytest.fixture
def strip_product():
    """10 tablets per strip, batch B1 opened with 100 tablets."""
    return Product(
        id="P1",
        name="Paracetamol 500",
        company="Acme Pharma",
        barcode="8901234567890",
        units_per_strip=10,
        opening_stock=0,
        batches=(
            Batch(
                id="B1",
                batch_number="B1",
                stock=125,
                opening_stock=100,
                purchase_price=Decimal("500"),
                mrp=Decimal("650"),
                expiry_date="2025-03",
            ),
        ),
    )


@pytest.fixture
def scenario_records():
    """Purchase of 5 strips on day 1, sale of 30 on day 5, return of 5 on day 6."""
    purchases = (
        PurchaseRecord(
            id="pur-1",
            raw_date="2024-06-01T10:00:00",
            invoice_number="INV-1",
            supplier="City Distributors",
            items=(
                PurchaseLine(
                    product_name="Paracetamol 500",
                    company="Acme Pharma",
                    quantity=5,
                    product_id="P1",
                    batch_number="B1",
                ),
            ),
        ),
    )
    sales = (
        SaleRecord(
            id="sale-1",
            raw_date="2024-06-05T15:30:00",
            bill_number="BILL-1",
            customer_name="Walk-in",
            items=(SaleLine(product_id="P1", quantity=30, batch_number="B1"),),
        ),
    )
    sale_returns = (
        SaleReturnRecord(
            id="sret-1",
            raw_date="2024-06-06T11:00:00",
            return_number="SR-1",
            customer_name="Walk-in",
            items=(ReturnLine(product_id="P1", quantity=5, batch_number="B1"),),
        ),
    )
    return {
        "purchases": purchases,
        "sales": sales,
        "purchase_returns": (),
        "sale_returns": sale_returns,
    }
