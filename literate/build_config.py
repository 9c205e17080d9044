"""Build configuration contract for the documentation generator.

The configuration is parsed once before any file is processed and is
read-only afterwards; every dataclass here is frozen.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from core.startup_config import ConfigurationError, load_config_payload
from literate.config import (
    DEFAULT_FILE_PATTERNS,
    DEFAULT_HIDE_MARKERS,
    DEFAULT_HIDE_SCOPE,
    DEFAULT_HOST_LANGUAGE,
    DEFAULT_NOISE_ATTRIBUTES,
    DEFAULT_NOISE_LINE_PATTERNS,
    DEFAULT_NON_RUNNABLE_MARKERS,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_RESUME_MARKERS,
    DEFAULT_TAB_WIDTH,
    DEFAULT_WORKERS,
    HIDE_SCOPES,
)
from literate.formats import OutputFormat, resolve_output_format


@dataclass(frozen=True)
class HideConfig:
    """Hidden-region markers and the rule ending an implicit region."""

    markers: tuple[str, ...] = DEFAULT_HIDE_MARKERS
    resume_markers: tuple[str, ...] = DEFAULT_RESUME_MARKERS
    scope: str = DEFAULT_HIDE_SCOPE


@dataclass(frozen=True)
class NoiseConfig:
    """Structural noise stripped from surviving code."""

    attributes: tuple[str, ...] = DEFAULT_NOISE_ATTRIBUTES
    non_runnable_markers: tuple[str, ...] = DEFAULT_NON_RUNNABLE_MARKERS
    line_patterns: tuple[str, ...] = DEFAULT_NOISE_LINE_PATTERNS


@dataclass(frozen=True)
class DocBuildConfig:
    """Top-level configuration for one documentation build."""

    input_root: str = "src"
    output_root: str = "docs"
    symbols: Mapping[str, bool] = field(default_factory=dict)
    undefined_symbols_false: bool = False
    host_language: str = DEFAULT_HOST_LANGUAGE
    file_patterns: tuple[str, ...] = DEFAULT_FILE_PATTERNS
    output_format: OutputFormat = field(
        default_factory=lambda: resolve_output_format(DEFAULT_OUTPUT_FORMAT)
    )
    hide: HideConfig = field(default_factory=HideConfig)
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    drop_structural_runs: bool = True
    include_preamble: bool = False
    tab_width: int = DEFAULT_TAB_WIDTH
    kebab_case_paths: bool = False
    workers: int = DEFAULT_WORKERS


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ConfigurationError(f"{ctx} must be an object")
    return payload


def _string_tuple(value: Any, ctx: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigurationError(f"{ctx} must be a list of strings")
    items = tuple(str(item).strip() for item in value)
    if any(not item for item in items):
        raise ConfigurationError(f"{ctx} contains an empty entry")
    return items


def _parse_bool(value: Any, ctx: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ConfigurationError(f"{ctx} must be true or false, got {value!r}")


def parse_symbols(payload: Any) -> dict[str, bool]:
    """Parse the condition-symbol mapping (``{SYMBOL: true|false}``)."""
    if payload is None:
        return {}
    symbols = _expect_dict(payload, "symbols")
    parsed: dict[str, bool] = {}
    for name, value in symbols.items():
        key = str(name).strip()
        if not re.fullmatch(r"[A-Za-z_]\w*", key):
            raise ConfigurationError(f"symbols: invalid symbol name {name!r}")
        parsed[key] = _parse_bool(value, f"symbols.{key}")
    return parsed


def _parse_hide(payload: Any) -> HideConfig:
    if payload is None:
        return HideConfig()
    hide = _expect_dict(payload, "hide")
    scope = str(hide.get("scope", DEFAULT_HIDE_SCOPE)).strip()
    if scope not in HIDE_SCOPES:
        raise ConfigurationError(
            f"hide.scope must be one of {sorted(HIDE_SCOPES)}, got {scope!r}"
        )
    return HideConfig(
        markers=_string_tuple(hide.get("markers"), "hide.markers", DEFAULT_HIDE_MARKERS),
        resume_markers=_string_tuple(
            hide.get("resume_markers"), "hide.resume_markers", DEFAULT_RESUME_MARKERS
        ),
        scope=scope,
    )


def _parse_noise(payload: Any) -> NoiseConfig:
    if payload is None:
        return NoiseConfig()
    noise = _expect_dict(payload, "noise")
    line_patterns = _string_tuple(
        noise.get("line_patterns"), "noise.line_patterns", DEFAULT_NOISE_LINE_PATTERNS
    )
    for pattern in line_patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigurationError(
                f"noise.line_patterns: invalid regex {pattern!r}: {exc}"
            ) from exc
    return NoiseConfig(
        attributes=_string_tuple(
            noise.get("attributes"), "noise.attributes", DEFAULT_NOISE_ATTRIBUTES
        ),
        non_runnable_markers=_string_tuple(
            noise.get("non_runnable_markers"),
            "noise.non_runnable_markers",
            DEFAULT_NON_RUNNABLE_MARKERS,
        ),
        line_patterns=line_patterns,
    )


def parse_build_config(payload: Mapping[str, Any]) -> DocBuildConfig:
    """Build a DocBuildConfig from a parsed YAML/JSON mapping.

    Raises:
        ConfigurationError: On any invalid entry.
    """
    payload = _expect_dict(payload, "config")

    try:
        output_format = resolve_output_format(
            payload.get("output_format", DEFAULT_OUTPUT_FORMAT)
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    try:
        tab_width = int(payload.get("tab_width", DEFAULT_TAB_WIDTH))
        workers = int(payload.get("workers", DEFAULT_WORKERS))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"tab_width and workers must be integers: {exc}") from exc
    if tab_width < 1 or workers < 1:
        raise ConfigurationError("tab_width and workers must be positive")

    host_language = str(payload.get("host_language", DEFAULT_HOST_LANGUAGE)).strip()
    if not host_language:
        raise ConfigurationError("host_language must not be empty")

    return DocBuildConfig(
        input_root=str(payload.get("input_root", "src")),
        output_root=str(payload.get("output_root", "docs")),
        symbols=MappingProxyType(parse_symbols(payload.get("symbols"))),
        undefined_symbols_false=_parse_bool(
            payload.get("undefined_symbols_false", False), "undefined_symbols_false"
        ),
        host_language=host_language,
        file_patterns=_string_tuple(
            payload.get("file_patterns"), "file_patterns", DEFAULT_FILE_PATTERNS
        ),
        output_format=output_format,
        hide=_parse_hide(payload.get("hide")),
        noise=_parse_noise(payload.get("noise")),
        drop_structural_runs=_parse_bool(
            payload.get("drop_structural_runs", True), "drop_structural_runs"
        ),
        include_preamble=_parse_bool(
            payload.get("include_preamble", False), "include_preamble"
        ),
        tab_width=tab_width,
        kebab_case_paths=_parse_bool(
            payload.get("kebab_case_paths", False), "kebab_case_paths"
        ),
        workers=workers,
    )


def load_build_config(path: str | None, strict: bool = False) -> DocBuildConfig:
    """Load a build configuration file, or defaults when ``path`` is None."""
    if path is None:
        return DocBuildConfig()
    return parse_build_config(load_config_payload(path, strict=strict))
