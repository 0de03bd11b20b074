"""
stock_config -- single public entrypoint for inventory settings.

Responsibility:
    ``get_active_config()`` loads the shipped defaults, merges an optional
    site file over them, and returns a frozen ``InventorySettings``.

Architecture position:
    Configuration -- sits above ``stock_kernel`` and below
    ``stock_services``.  Engines never import this package; services pass
    the individual values into engine constructors.

Audit relevance:
    Every successful call emits a ``STOCK_CONFIG_TRACE`` log entry with the
    settings checksum and source file.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from pathlib import Path

import pytz

from stock_config.loader import load_yaml_file, parse_settings
from stock_config.schema import InventorySettings

_logger = logging.getLogger("stock_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | str | None = None) -> InventorySettings:
    """Load the effective inventory settings.

    Args:
        config_path: Optional site settings file; its keys override the
            shipped defaults.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        yaml.YAMLError: If a settings file is not valid YAML.
        InvalidSettingError: If a value is out of range or unknown.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)
    if config_path is not None:
        data.update(load_yaml_file(Path(config_path)))
        source = str(config_path)

    settings = parse_settings(data, source=source)

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "source": settings.source,
            "checksum": settings.checksum,
            "currency": settings.currency,
            "near_expiry_days": settings.near_expiry_days,
            "timezone": settings.timezone,
        },
    )
    return settings


def day_timezone(settings: InventorySettings) -> tzinfo:
    """The zone whose midnight starts a business day."""
    return pytz.timezone(settings.timezone)


__all__ = ["InventorySettings", "day_timezone", "get_active_config"]
