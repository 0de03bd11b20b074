"""
stock_engines.tracer -- Engine invocation tracer emitting STOCK_ENGINE_TRACE.

Responsibility:
    ``@traced_engine`` wraps a pure engine method and logs one
    STOCK_ENGINE_TRACE record per call: engine name and version, a
    fingerprint of the selected inputs, and the duration.

Fingerprints:
    Selected arguments are bound by name whether they were passed by
    position or by keyword, then reduced to a JSON document and hashed
    (SHA-256, first 16 hex chars).  Dataclasses contribute their type
    name and fields; Decimals, dates and enums contribute their value, so
    two products that differ only in a batch price fingerprint apart.

    A selected argument passed as a one-shot iterator is materialised to
    a tuple first; the engine then receives the tuple, so hashing never
    consumes its input.

Usage:
    from stock_engines.tracer import traced_engine

    @traced_engine("ledger", "1.0", fingerprint_fields=("movements",))
    def build(self, product, movements, window=None):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable, Iterator, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from stock_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")


def _canonical(value: Any) -> Any:
    """Reduce a value to JSON-compatible data with a stable ordering."""
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Enum):
        return _canonical(value.value)
    if isinstance(value, Decimal):
        return {"decimal": str(value)}
    if isinstance(value, float):
        return {"float": repr(value)}
    if isinstance(value, (datetime, date)):
        return {type(value).__name__: value.isoformat()}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            "type": type(value).__name__,
            "fields": {
                f.name: _canonical(getattr(value, f.name))
                for f in dataclasses.fields(value)
            },
        }
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(v) for v in value), key=json.dumps)
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """16-character SHA-256 prefix over the named arguments; absent ones hash as null."""
    document = {name: _canonical(arguments.get(name)) for name in fingerprint_fields}
    encoded = json.dumps(document, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits STOCK_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "ledger").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names to include in the input
            fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                for name in fingerprint_fields:
                    if isinstance(bound.arguments.get(name), Iterator):
                        bound.arguments[name] = tuple(bound.arguments[name])
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)
                args, kwargs = bound.args, bound.kwargs

            started = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - started) * 1000, 2)

            logger.info("STOCK_ENGINE_TRACE", extra={
                "trace_type": "STOCK_ENGINE_TRACE",
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": duration_ms,
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
