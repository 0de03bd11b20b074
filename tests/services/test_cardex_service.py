"""
Tests for the cardex service.

Covers:
- Default upper bound from the injected clock
- Snapshots of caller collections
- Building from stored documents
- Module-level shortcut
- Business-day zone from settings
- Malformed stored documents skipped
"""

from datetime import UTC, date, datetime

from stock_config.schema import InventorySettings
from stock_engines.ledger import DateWindow
from stock_engines.movements import MovementKind
from stock_kernel.domain.catalog import Product
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.records import SaleLine, SaleRecord
from stock_services import CardexService, TransactionSources, build_cardex


class TestBuildCardex:
    """Tests for statement building."""

    def test_scenario(self, clock, strip_product, scenario_records):
        sources = TransactionSources.snapshot(**scenario_records)
        statement = CardexService(clock=clock).build_cardex(strip_product, sources)

        assert statement.opening_balance == 0
        assert [r.balance_after for r in statement.rows] == [100, 150, 120, 125]
        assert statement.closing_balance == 125

    def test_end_defaults_to_clock_today(self, strip_product, scenario_records):
        """Movements after the clock's date are not listed."""
        clock = DeterministicClock(datetime(2024, 6, 5, 8, 0, tzinfo=UTC))
        sources = TransactionSources.snapshot(**scenario_records)
        statement = CardexService(clock=clock).build_cardex(strip_product, sources)

        assert statement.window.end == date(2024, 6, 5)
        assert [r.kind for r in statement.rows] == [
            MovementKind.OPENING, MovementKind.PURCHASE, MovementKind.SALE,
        ]
        assert statement.closing_balance == 120

    def test_explicit_window_end_kept(self, clock, strip_product, scenario_records):
        sources = TransactionSources.snapshot(**scenario_records)
        window = DateWindow(start=date(2024, 6, 2), end=date(2024, 6, 5))
        statement = CardexService(clock=clock).build_cardex(strip_product, sources, window)

        assert statement.window == window
        assert statement.opening_balance == 150
        assert [r.kind for r in statement.rows] == [MovementKind.OPENING, MovementKind.SALE]

    def test_idempotent(self, clock, strip_product, scenario_records):
        sources = TransactionSources.snapshot(**scenario_records)
        service = CardexService(clock=clock)
        assert service.build_cardex(strip_product, sources) == service.build_cardex(
            strip_product, sources,
        )

    def test_product_id_bound_in_logs(self, clock, strip_product, scenario_records, captured_logs):
        sources = TransactionSources.snapshot(**scenario_records)
        CardexService(clock=clock).build_cardex(strip_product, sources)

        served = next(r for r in captured_logs() if r["message"] == "cardex_served")
        assert served["product_id"] == "P1"
        assert served["view"] == "cardex"
        assert served["row_count"] == 4

    def test_module_level_shortcut(self, clock, strip_product, scenario_records):
        sources = TransactionSources.snapshot(**scenario_records)
        statement = build_cardex(strip_product, sources, clock=clock)
        assert statement.closing_balance == 125


class TestTransactionSources:
    """Tests for source snapshots."""

    def test_snapshot_isolated_from_caller_list(self):
        sales = [SaleRecord(id="s1", raw_date="2024-01-02", items=(SaleLine("P", 3),))]
        sources = TransactionSources.snapshot(sales=sales)
        sales.append(SaleRecord(id="s2", raw_date="2024-01-03", items=(SaleLine("P", 4),)))

        statement = CardexService(clock=DeterministicClock()).build_cardex(
            Product(id="P", name="X"), sources, DateWindow(end=date(2024, 12, 31)),
        )
        assert statement.closing_balance == -3

    def test_snapshot_drops_tombstones(self):
        sources = TransactionSources.snapshot(sales=[None])
        assert sources.sales == ()

    def test_from_documents(self, clock):
        sources = TransactionSources.from_documents(
            purchases=[{
                "id": "p1", "invoiceDate": "2024-05-01",
                "items": [{"productName": "Gauze", "company": "Acme", "quantity": 2}],
            }],
            sales=[None, {"id": "s1", "date": "2024-05-02",
                          "items": [{"productId": "G1", "quantity": 3}]}],
            sale_returns=[{"id": "r1", "date": "not-a-date",
                           "items": [{"productId": "G1", "quantity": 1}]}],
        )
        product = Product(id="G1", name="gauze", company="ACME", units_per_strip=12)
        statement = CardexService(clock=clock).build_cardex(product, sources)

        assert [(r.kind, r.in_qty, r.out_qty) for r in statement.rows] == [
            (MovementKind.PURCHASE, 24, 0),
            (MovementKind.SALE, 0, 3),
        ]
        assert statement.closing_balance == 21

    def test_malformed_document_skipped_rest_kept(self, clock, captured_logs):
        sources = TransactionSources.from_documents(
            sales=["garbage", {"id": "s1", "date": "2024-05-02",
                               "items": [{"productId": "G1", "quantity": 3}]}],
        )
        statement = CardexService(clock=clock).build_cardex(Product(id="G1", name="gauze"), sources)

        assert [r.out_qty for r in statement.rows] == [3]
        skipped = [r for r in captured_logs() if r["message"] == "document_skipped_malformed"]
        assert [(r["document_type"], r["position"]) for r in skipped] == [("sale", 0)]


class TestBusinessDayZone:
    """Day boundaries follow the configured zone."""

    def _late_bill(self):
        return TransactionSources.snapshot(sales=[SaleRecord(
            id="s1", raw_date="2024-06-05T20:00:00+00:00",
            items=(SaleLine(product_id="P", quantity=2),),
        )])

    def test_utc_day_includes_evening_bill(self):
        clock = DeterministicClock(datetime(2024, 6, 5, 21, 0, tzinfo=UTC))
        statement = CardexService(clock=clock, settings=InventorySettings()).build_cardex(
            Product(id="P", name="X"), self._late_bill(),
        )
        assert statement.window.end == date(2024, 6, 5)
        assert statement.closing_balance == -2

    def test_kolkata_day_moves_bill_and_today(self):
        """20:00 UTC on the 5th is 01:30 on the 6th in Kolkata."""
        clock = DeterministicClock(datetime(2024, 6, 5, 21, 0, tzinfo=UTC))
        service = CardexService(clock=clock, settings=InventorySettings(timezone="Asia/Kolkata"))
        product = Product(id="P", name="X")

        statement = service.build_cardex(product, self._late_bill())
        assert statement.window.end == date(2024, 6, 6)
        assert statement.rows[0].date == datetime(2024, 6, 6, 1, 30)

        through_fifth = service.build_cardex(
            product, self._late_bill(), DateWindow(end=date(2024, 6, 5)),
        )
        assert through_fifth.rows == ()
