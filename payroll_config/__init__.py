"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains a
    ``PayrollEngineConfig``.  Resolution order:

    1. an explicit ``path`` argument,
    2. the ``PAYROLL_CONFIG_PATH`` environment variable,
    3. the packaged ``defaults/payroll.yaml``.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` (it uses the kernel's
    logging and exceptions) and below ``payroll_services`` /
    ``payroll_batch``.  The kernel never imports from here.

Audit relevance:
    Every call emits a ``PAYROLL_CONFIG_TRACE`` log entry carrying the
    source path and the config checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from payroll_config.loader import compute_checksum, load_yaml_file, parse_engine_config
from payroll_config.schema import (
    DEFAULT_LEAVE_POLICIES,
    AttendanceConfig,
    LeavePolicyDef,
    PayrollEngineConfig,
)
from payroll_kernel.logging_config import get_logger

__all__ = [
    "AttendanceConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LEAVE_POLICIES",
    "LeavePolicyDef",
    "PayrollEngineConfig",
    "get_active_config",
]

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "payroll.yaml"
CONFIG_PATH_ENV = "PAYROLL_CONFIG_PATH"


def get_active_config(path: Path | None = None) -> PayrollEngineConfig:
    """Load and validate the payroll configuration.

    Raises:
        FileNotFoundError: if the resolved file does not exist.
        InvalidPayrollConfigError: if the file fails validation.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    config = parse_engine_config(load_yaml_file(path))

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": compute_checksum(config),
            "leave_policy_count": len(config.leave_policies),
        },
    )
    return config
