"""Core shared contracts and utilities."""

from core.structured_logging import (
    configure_structured_logging,
    copy_log_context,
    get_run_id,
    phase_scope,
    set_run_id,
    source_scope,
)
from core.startup_config import (
    ConfigurationError,
    env_int,
    load_config_payload,
    resolve_strict_config_validation,
    validate_roots,
)
from core.run_artifacts import run_status, write_run_report

__all__ = [
    "configure_structured_logging",
    "copy_log_context",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "source_scope",
    "ConfigurationError",
    "env_int",
    "load_config_payload",
    "resolve_strict_config_validation",
    "validate_roots",
    "run_status",
    "write_run_report",
]
