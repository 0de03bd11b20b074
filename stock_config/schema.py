"""
Configuration schema (``stock_config.schema``).

Frozen dataclasses for the parsed inventory settings.  Declarative data
only; no validation or I/O happens here (see ``stock_config.loader``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class InventorySettings:
    """Effective inventory settings after merging a site file over defaults."""

    currency: str = "INR"
    near_expiry_days: int = 90
    never_expires: date = date(9999, 12, 31)
    default_batch_labels: tuple[str, ...] = ("OPENING", "DEFAULT")
    low_stock_strips: int = 1
    timezone: str = "UTC"
    checksum: str = ""
    source: str = ""
