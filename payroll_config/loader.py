"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a payroll YAML file and parses it into the typed frozen dataclasses
of ``payroll_config.schema``.  Runtime callers go through
``payroll_config.get_active_config()``; the parse functions are public so
tests and tools can build configs from plain dicts.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Values that fail validation -> ``InvalidPayrollConfigError``.
* Unparseable times or decimals -> ``ValueError``.

``compute_checksum`` gives a deterministic SHA-256 of the parsed config so
a run can be tied back to the exact configuration that produced it.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    DEFAULT_LEAVE_POLICIES,
    AttendanceConfig,
    LeavePolicyDef,
    PayrollEngineConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_time(value: Any) -> time:
    """
    Parse a time of day from YAML.

    Accepts ``time`` objects, ``"HH:MM"`` strings, and decimal hours
    (``8``, ``12.5`` -> 12:30).  Times must be quoted in YAML: PyYAML reads
    an unquoted ``13:00`` as the base-60 integer 780.

    Raises:
        ValueError: if ``value`` is not a valid time of day.
    """
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value)
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        hours = Decimal(str(value))
        if not Decimal("0") <= hours < Decimal("24"):
            raise ValueError(f"Hour value {value!r} is outside 0-24")
        minutes = int((hours * 60).to_integral_value())
        return time(minutes // 60, minutes % 60)
    raise ValueError(f"Cannot parse time from {value!r}")


def parse_decimal(value: Any) -> Decimal:
    """Parse a Decimal from YAML without going through float."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse decimal from {value!r}") from exc


def parse_attendance_config(data: dict[str, Any]) -> AttendanceConfig:
    """Parse an ``AttendanceConfig``; missing keys keep their defaults."""
    defaults = AttendanceConfig()
    return AttendanceConfig(
        morning_start=parse_time(data.get("morning_start", defaults.morning_start)),
        morning_end=parse_time(data.get("morning_end", defaults.morning_end)),
        afternoon_start=parse_time(data.get("afternoon_start", defaults.afternoon_start)),
        afternoon_end=parse_time(data.get("afternoon_end", defaults.afternoon_end)),
        grace_period_minutes=int(
            data.get("grace_period_minutes", defaults.grace_period_minutes)
        ),
        session_cap_hours=parse_decimal(
            data.get("session_cap_hours", defaults.session_cap_hours)
        ),
        max_daily_hours=parse_decimal(data.get("max_daily_hours", defaults.max_daily_hours)),
        timezone=str(data.get("timezone", defaults.timezone)),
    )


def parse_leave_policy(leave_type: str, data: dict[str, Any]) -> LeavePolicyDef:
    """
    Parse one leave policy entry.

    Raises:
        KeyError: if ``is_paid`` is missing.
    """
    is_paid = bool(data["is_paid"])
    max_days = data.get("max_paid_days_per_year")
    return LeavePolicyDef(
        leave_type=leave_type.lower(),
        is_paid=is_paid,
        payment_percentage=parse_decimal(
            data.get("payment_percentage", 100 if is_paid else 0)
        ),
        max_paid_days_per_year=int(max_days) if max_days is not None else None,
    )


def parse_leave_policies(data: dict[str, Any]) -> tuple[LeavePolicyDef, ...]:
    """Parse a ``{leave_type: {...}}`` mapping into policy definitions."""
    return tuple(
        parse_leave_policy(leave_type, entry)
        for leave_type, entry in data.items()
    )


def parse_engine_config(data: dict[str, Any]) -> PayrollEngineConfig:
    """Parse the top-level payroll YAML document."""
    leave_data = data.get("leave_policies")
    return PayrollEngineConfig(
        attendance=parse_attendance_config(data.get("attendance") or {}),
        leave_policies=(
            parse_leave_policies(leave_data) if leave_data else DEFAULT_LEAVE_POLICIES
        ),
        hours_per_day=parse_decimal(data.get("hours_per_day", "8")),
    )


def compute_checksum(config: PayrollEngineConfig) -> str:
    """Deterministic SHA-256 hex digest of a parsed configuration."""
    canonical = json.dumps(asdict(config), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
