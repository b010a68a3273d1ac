"""
payroll_engines.tracer -- Engine invocation tracer emitting PAYROLL_ENGINE_TRACE.

Responsibility:
    ``@traced_engine`` wraps a pure engine function with one structured
    trace record: engine name, version, a deterministic fingerprint of
    selected keyword arguments, and duration.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; does not read or mutate engine inputs.

Usage:
    @traced_engine("amortization", "1.0", fingerprint_fields=("balances",))
    def amortize_balances(balances, period_start, period_end):
        ...

Fingerprints only see keyword arguments.  Positional arguments are
recorded as "null".
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable
from typing import Any

from payroll_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    """Stable string representation of a value for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, (int, str)):
        return str(value)
    if isinstance(value, dict):
        items = sorted(value.items())
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """SHA-256 prefix (16 hex chars) of the selected keyword arguments."""
    parts = [f"{name}={_canonicalize(kwargs.get(name))}" for name in fingerprint_fields]
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits PAYROLL_ENGINE_TRACE for each invocation."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.debug(
                "PAYROLL_ENGINE_TRACE",
                extra={
                    "trace_type": "PAYROLL_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
