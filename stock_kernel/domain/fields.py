"""Lenient field readers for documents coming out of the document store."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any


def as_text(value: Any) -> str:
    """Return a string, treating None as empty."""
    if value is None:
        return ""
    return str(value)


def as_decimal(value: Any, default: Decimal | None = Decimal("0")) -> Decimal | None:
    """Return a finite Decimal, or ``default`` when the value does not parse."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def as_int(value: Any, default: int = 0) -> int:
    """
    Return an integer, or ``default`` when the value does not parse.

    NaN and infinities count as unparseable; fractions are truncated.
    """
    number = as_decimal(value, default=None)
    if number is None:
        return default
    return int(number)


def as_optional_text(value: Any) -> str | None:
    text = as_text(value).strip()
    return text or None


def items_of(document: Mapping[str, Any]) -> list[Any]:
    """Line items of a record document; anything but a list counts as none."""
    items = document.get("items")
    return items if isinstance(items, list) else []
