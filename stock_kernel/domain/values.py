"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides Currency and Money, the value types used for every stock
    valuation figure.  Amounts are Decimal, never float.  Valuation only
    ever sums figures, so Money supports addition and nothing more.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Money pairs a Decimal amount with a Currency; they are never separated.
    - Currency codes are validated against the supported ISO 4217 set.
    - Addition never silently mixes currencies.

Failure modes:
    - ValueError on construction with invalid amounts or currencies.
    - ValueError when adding different currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

SUPPORTED_CURRENCIES: frozenset[str] = frozenset({
    "INR", "USD", "EUR", "GBP", "AED", "PKR", "BDT", "LKR", "NPR", "KES", "JPY",
})


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - code is always uppercase and stripped of whitespace
        - code is always one of the supported ISO 4217 codes
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if normalized not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return bool(code) and code.upper().strip() in SUPPORTED_CURRENCIES

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - amount is always a Decimal (never float); negatives are allowed
        - Addition enforces the same-currency constraint
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=Decimal("0"), currency=currency)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
