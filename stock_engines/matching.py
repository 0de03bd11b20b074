"""
stock_engines.matching -- Product identity matching for line items.

Responsibility:
    Decide whether a loosely identified line item (purchase, return or
    sale line) refers to a given product.  Purchase invoices often carry
    no resolved product id: the operator may key in a name and company for
    a new line, so matching degrades from exact id, to exact code, to
    name + company triangulation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Decision procedure (evaluated in this order, first hit wins):
    1. ID            -- line.product_id equals product.id.
    2. BARCODE       -- normalised barcodes are both non-empty and equal.
    3. NAME_COMPANY  -- both normalised barcodes are empty, and the
                        trimmed, case-folded name and company both equal.
    Otherwise no match.  Rule 3 never fires when only one side has a
    barcode, so a barcoded product cannot absorb an unrelated unbarcoded
    line that happens to share its name.

Failure modes:
    None.  Missing attributes are treated as empty strings; the matcher
    never raises.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum
from typing import Any

from stock_kernel.domain.catalog import Product
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.matching")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class MatchRule(str, Enum):
    """Which identity key matched a line to a product."""

    ID = "id"
    BARCODE = "barcode"
    NAME_COMPANY = "name_company"


def normalize_code(value: Any) -> str:
    """Lower-case and strip everything that is not ``[a-z0-9]``."""
    if value is None:
        return ""
    return _NON_ALNUM.sub("", str(value).lower())


def _folded(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


class ProductMatcher:
    """
    Matches line items to products.

    Contract:
        Pure functions -- no I/O.  Each rule is exposed separately so the
        precedence can be tested rule by rule.
    Guarantees:
        - ``matches`` never raises, whatever the shape of the line item.
    """

    def matches_by_id(self, product: Product, line: Any) -> bool:
        product_id = getattr(line, "product_id", None)
        return bool(product_id) and product_id == product.id

    def matches_by_barcode(self, product: Product, line: Any) -> bool:
        product_code = normalize_code(product.barcode)
        line_code = normalize_code(getattr(line, "barcode", None))
        return product_code != "" and product_code == line_code

    def matches_by_name_and_company(self, product: Product, line: Any) -> bool:
        if normalize_code(product.barcode) or normalize_code(getattr(line, "barcode", None)):
            return False
        return (
            _folded(getattr(line, "product_name", None)) == _folded(product.name)
            and _folded(getattr(line, "company", None)) == _folded(product.company)
        )

    def match_rule(self, product: Product, line: Any) -> MatchRule | None:
        """The first rule that matches, or None."""
        if self.matches_by_id(product, line):
            return MatchRule.ID
        if self.matches_by_barcode(product, line):
            return MatchRule.BARCODE
        if self.matches_by_name_and_company(product, line):
            logger.debug("line_matched_by_name_company", extra={
                "product_id": product.id,
                "product_name": product.name,
            })
            return MatchRule.NAME_COMPANY
        return None

    def matches(self, product: Product, line: Any) -> bool:
        return self.match_rule(product, line) is not None


def product_filter(
    search: str | None = None,
    company: str | None = None,
) -> Callable[[Product], bool]:
    """
    Build the product master filter: a case-insensitive substring match on
    name or company, a substring match on barcode, and an exact company
    filter (``None`` or ``"All"`` disables it).
    """
    term = (search or "").strip()
    folded_term = term.lower()
    company_filter = None if company in (None, "", "All") else company

    def predicate(product: Product) -> bool:
        if company_filter is not None and product.company != company_filter:
            return False
        if not term:
            return True
        return (
            folded_term in product.name.lower()
            or folded_term in product.company.lower()
            or (product.barcode is not None and term in product.barcode)
        )

    return predicate
