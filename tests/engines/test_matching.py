"""
Tests for the product matcher.

Covers:
- Rule precedence (id, barcode, name + company)
- Barcode normalisation
- One-sided barcodes never fall through to name matching
- Lines with missing attributes
- Product master filter
"""

from types import SimpleNamespace

import pytest

from stock_engines.matching import (
    MatchRule,
    ProductMatcher,
    normalize_code,
    product_filter,
)
from stock_kernel.domain.catalog import Product
from stock_kernel.domain.records import PurchaseLine


def _line(**kwargs):
    defaults = {"product_name": "", "company": "", "quantity": 1}
    defaults.update(kwargs)
    return PurchaseLine(**defaults)


class TestNormalizeCode:
    """Tests for barcode normalisation."""

    @pytest.mark.parametrize("raw, expected", [
        ("AB-123 ", "ab123"),
        (" 89 01-23/4 ", "8901234"),
        ("ab123", "ab123"),
        ("---", ""),
        (None, ""),
        ("", ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_code(raw) == expected


class TestMatchPrecedence:
    """Tests for the ordered decision procedure."""

    def setup_method(self):
        self.matcher = ProductMatcher()
        self.product = Product(
            id="P1", name="Amoxil 250", company="GSK", barcode="AB-123 ",
        )

    def test_id_wins(self):
        """A matching product id matches even with a conflicting barcode."""
        line = _line(product_id="P1", barcode="zzz")
        assert self.matcher.match_rule(self.product, line) == MatchRule.ID

    def test_barcode_normalised_match(self):
        line = _line(barcode="ab123")
        assert self.matcher.match_rule(self.product, line) == MatchRule.BARCODE

    def test_different_barcode_blocks_name_match(self):
        """Same name and company but a different barcode must not match."""
        line = _line(product_name="Amoxil 250", company="GSK", barcode="XY-999")
        assert not self.matcher.matches(self.product, line)

    def test_line_without_barcode_does_not_match_barcoded_product(self):
        """Name matching requires both sides to lack a barcode."""
        line = _line(product_name="Amoxil 250", company="GSK")
        assert not self.matcher.matches(self.product, line)

    def test_other_id_and_no_barcode(self):
        line = _line(product_id="P2")
        assert self.matcher.match_rule(self.product, line) is None


class TestNameCompanyMatch:
    """Tests for the name + company fallback."""

    def setup_method(self):
        self.matcher = ProductMatcher()
        self.product = Product(id="P9", name="Cough Syrup", company="Himalaya")

    def test_case_and_whitespace_insensitive(self):
        line = _line(product_name="  cough SYRUP ", company="HIMALAYA ")
        assert self.matcher.match_rule(self.product, line) == MatchRule.NAME_COMPANY

    def test_company_must_match(self):
        line = _line(product_name="Cough Syrup", company="Dabur")
        assert not self.matcher.matches(self.product, line)

    def test_barcode_of_only_punctuation_counts_as_empty(self):
        line = _line(product_name="Cough Syrup", company="Himalaya", barcode=" - ")
        assert self.matcher.matches(self.product, line)

    def test_barcoded_line_does_not_match_unbarcoded_product(self):
        line = _line(product_name="Cough Syrup", company="Himalaya", barcode="123")
        assert not self.matcher.matches(self.product, line)

    def test_name_match_is_logged(self, captured_logs):
        line = _line(product_name="Cough Syrup", company="Himalaya")
        self.matcher.matches(self.product, line)

        logs = captured_logs()
        assert any(r["message"] == "line_matched_by_name_company" for r in logs)


class TestMissingAttributes:
    """The matcher never raises on oddly shaped lines."""

    def test_bare_object(self):
        product = Product(id="P1", name="", company="")
        assert ProductMatcher().matches(product, object())

    def test_bare_object_against_barcoded_product(self):
        product = Product(id="P1", name="X", company="Y", barcode="123")
        assert not ProductMatcher().matches(product, SimpleNamespace())

    def test_none_fields(self):
        product = Product(id="P1", name="X", company="Y")
        line = SimpleNamespace(product_id=None, barcode=None, product_name=None, company=None)
        assert not ProductMatcher().matches(product, line)


class TestProductFilter:
    """Tests for the product master filter predicate."""

    def setup_method(self):
        self.products = [
            Product(id="1", name="Dolo 650", company="Micro Labs", barcode="8901"),
            Product(id="2", name="Crocin", company="GSK", barcode="8902"),
            Product(id="3", name="Amoxil", company="GSK"),
        ]

    def _ids(self, predicate):
        return [p.id for p in self.products if predicate(p)]

    def test_no_filter(self):
        assert self._ids(product_filter()) == ["1", "2", "3"]

    def test_search_by_name_case_insensitive(self):
        assert self._ids(product_filter(search="dolo")) == ["1"]

    def test_search_by_company(self):
        assert self._ids(product_filter(search="gsk")) == ["2", "3"]

    def test_search_by_barcode(self):
        assert self._ids(product_filter(search="8902")) == ["2"]

    def test_company_filter(self):
        assert self._ids(product_filter(company="GSK")) == ["2", "3"]

    def test_company_all_disables_filter(self):
        assert self._ids(product_filter(company="All")) == ["1", "2", "3"]

    def test_search_and_company_combined(self):
        assert self._ids(product_filter(search="amox", company="GSK")) == ["3"]
