"""Startup configuration validation helpers.

Provides strict/non-strict config file loading and the root-directory checks
that must pass before the documentation build touches any source file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the build configuration is unusable; aborts the whole run."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %d", name, raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring non-positive %s=%r; using %d", name, raw, default)
        return default
    return value


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def load_config_payload(
    config_path: str,
    strict: bool = False,
) -> dict[str, Any]:
    """Load and parse a YAML or JSON build configuration file.

    In non-strict mode a missing file yields an empty dict (defaults apply).
    Malformed content always raises ``ConfigurationError``: a config that
    exists but cannot be read is never silently replaced by defaults.
    """
    path = Path(config_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Config file not found: {config_path}"
        if strict:
            raise ConfigurationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {config_path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Failed to parse config file {config_path}: {exc}"
        ) from exc

    if payload is None:
        msg = f"Config file is empty: {config_path}"
        if strict:
            raise ConfigurationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if not isinstance(payload, dict):
        raise ConfigurationError(
            f"Unexpected config payload type: {type(payload).__name__}"
        )

    return payload


def validate_roots(input_root: str, output_root: str) -> dict[str, Any]:
    """Check that the input root is a readable directory and the output root is writable.

    The output root is created when missing.

    Returns:
        Summary with the resolved absolute roots.

    Raises:
        ConfigurationError: If either root is unusable.
    """
    input_path = Path(input_root).resolve()
    output_path = Path(output_root).resolve()

    if not input_path.is_dir():
        raise ConfigurationError(f"Input root is not a directory: {input_path}")
    if not os.access(input_path, os.R_OK | os.X_OK):
        raise ConfigurationError(f"Input root is not readable: {input_path}")

    if output_path.exists() and not output_path.is_dir():
        raise ConfigurationError(f"Output root is not a directory: {output_path}")
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Cannot create output root {output_path}: {exc}"
        ) from exc
    if not os.access(output_path, os.W_OK):
        raise ConfigurationError(f"Output root is not writable: {output_path}")

    if output_path == input_path:
        raise ConfigurationError("Output root must differ from input root")

    return {
        "input_root": str(input_path),
        "output_root": str(output_path),
    }
