"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into the frozen
``InventorySettings`` dataclass.  The runtime entry point is
``stock_config.get_active_config()``; services call that, engines never
read configuration.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Out-of-range or mistyped value  -> ``InvalidSettingError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any

import pytz
import yaml

from stock_config.schema import InventorySettings
from stock_kernel.domain.values import Currency
from stock_kernel.exceptions import InvalidSettingError

KNOWN_KEYS = frozenset({
    "currency",
    "near_expiry_days",
    "never_expires",
    "default_batch_labels",
    "low_stock_strips",
    "timezone",
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidSettingError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidSettingError("<root>", data, "settings file must hold a mapping")
    return data


def parse_date(key: str, value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise InvalidSettingError(key, value, "expected YYYY-MM-DD") from e
    raise InvalidSettingError(key, value, "expected a date")


def parse_timezone(key: str, value: Any) -> str:
    """Validate an IANA zone name such as ``Asia/Kolkata``."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidSettingError(key, value, "expected an IANA time zone name")
    try:
        return pytz.timezone(value.strip()).zone
    except pytz.UnknownTimeZoneError as e:
        raise InvalidSettingError(key, value, "unknown time zone") from e


def _non_negative_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidSettingError(key, value, "expected a non-negative integer")
    return value


def parse_settings(data: dict[str, Any], source: str = "") -> InventorySettings:
    """
    Parse a merged settings dict into ``InventorySettings``.

    Unknown keys are rejected so that typos do not silently fall back to
    defaults.
    """
    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise InvalidSettingError(unknown[0], data[unknown[0]], "unknown setting")

    defaults = InventorySettings()

    currency = str(data.get("currency", defaults.currency))
    if not Currency.is_valid(currency):
        raise InvalidSettingError("currency", currency, "not a supported ISO 4217 code")

    labels = data.get("default_batch_labels", list(defaults.default_batch_labels))
    if not isinstance(labels, list) or not all(isinstance(x, str) for x in labels):
        raise InvalidSettingError("default_batch_labels", labels, "expected a list of strings")

    settings = InventorySettings(
        currency=currency.upper().strip(),
        near_expiry_days=_non_negative_int(
            "near_expiry_days", data.get("near_expiry_days", defaults.near_expiry_days)
        ),
        never_expires=parse_date(
            "never_expires", data.get("never_expires", defaults.never_expires)
        ),
        default_batch_labels=tuple(labels),
        low_stock_strips=_non_negative_int(
            "low_stock_strips", data.get("low_stock_strips", defaults.low_stock_strips)
        ),
        timezone=parse_timezone("timezone", data.get("timezone", defaults.timezone)),
        source=source,
    )
    return replace(settings, checksum=compute_checksum(settings))


def compute_checksum(settings: InventorySettings) -> str:
    """Deterministic SHA-256 over the effective setting values."""
    payload = {
        "currency": settings.currency,
        "near_expiry_days": settings.near_expiry_days,
        "never_expires": settings.never_expires.isoformat(),
        "default_batch_labels": list(settings.default_batch_labels),
        "low_stock_strips": settings.low_stock_strips,
        "timezone": settings.timezone,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
