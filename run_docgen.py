#!/usr/bin/env python3
"""
Top-level driver for the literate documentation generator.

Walks an input tree of annotated sources, extracts documentation blocks and
their code samples, and regenerates the mirrored documentation tree.

Usage:
    python run_docgen.py --input-root src --output-root docs
    python run_docgen.py --config docgen.yml --define DOTNETCORE=false
    python run_docgen.py --input-root src --output-root site --format markdown
"""

import argparse
import logging
import sys
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, List, Optional

from core.run_artifacts import DEFAULT_REPORT_DIR, run_status, write_run_report
from core.startup_config import ConfigurationError, resolve_strict_config_validation
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from literate.build_config import DocBuildConfig, load_build_config, parse_symbols
from literate.emitter import EmitStats, emit_tree
from literate.formats import resolve_output_format

logger = logging.getLogger(__name__)

EXIT_CONFIGURATION_ERROR = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Literate documentation generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_docgen.py --input-root src --output-root docs\n"
            "  python run_docgen.py --config docgen.yml --define DOTNETCORE=false\n"
        )
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML/JSON build configuration file."
    )
    parser.add_argument(
        "--input-root",
        default=None,
        help="Directory containing annotated source files (overrides config)."
    )
    parser.add_argument(
        "--output-root",
        default=None,
        help="Directory receiving the generated documents (overrides config)."
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        default=None,
        help="Output format: asciidoc or markdown (overrides config)."
    )
    parser.add_argument(
        "--define",
        action="append",
        default=[],
        metavar="SYMBOL=BOOL",
        help="Set a condition symbol, e.g. DOTNETCORE=false. Repeatable."
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files processed in parallel."
    )
    parser.add_argument(
        "--kebab-case-paths",
        action="store_true",
        default=None,
        help="Write output paths as kebab-case (WorkingWithCertificates -> working-with-certificates)."
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail when the config file is missing or empty instead of using defaults."
    )
    parser.add_argument(
        "--report-dir",
        default=DEFAULT_REPORT_DIR,
        help=f"Directory for the JSON run report. Default: {DEFAULT_REPORT_DIR}"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity."
    )

    return parser.parse_args(argv)


def parse_defines(defines: List[str]) -> Dict[str, bool]:
    """Turn ``["A=true", "B=false"]`` into a symbol mapping.

    Raises:
        ConfigurationError: For entries without ``=`` or with a non-boolean value.
    """
    raw: Dict[str, str] = {}
    for item in defines:
        if "=" not in item:
            raise ConfigurationError(f"--define expects SYMBOL=true|false, got {item!r}")
        name, value = item.split("=", 1)
        raw[name.strip()] = value.strip()
    return parse_symbols(raw)


def build_config(args: argparse.Namespace) -> DocBuildConfig:
    """Load the config file and apply command-line overrides."""
    config = load_build_config(args.config, strict=args.strict_config)

    overrides = {}
    if args.input_root is not None:
        overrides["input_root"] = args.input_root
    if args.output_root is not None:
        overrides["output_root"] = args.output_root
    if args.output_format is not None:
        try:
            overrides["output_format"] = resolve_output_format(args.output_format)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    if args.workers is not None:
        if args.workers < 1:
            raise ConfigurationError("--workers must be positive")
        overrides["workers"] = args.workers
    if args.kebab_case_paths:
        overrides["kebab_case_paths"] = True
    if args.define:
        symbols = dict(config.symbols)
        symbols.update(parse_defines(args.define))
        overrides["symbols"] = MappingProxyType(symbols)

    return replace(config, **overrides)


def log_summary(stats: EmitStats) -> None:
    """Log skipped files and callout warnings."""
    summary = stats.to_dict()
    for failure in summary["failures"]:
        location = failure["path"]
        if failure["line"] is not None:
            location = f"{location}:{failure['line']}"
        logger.error("Skipped %s: %s", location, failure["message"])
    for warning in summary["warnings"]:
        logger.warning(
            "Callout warning %s:%s: %s", warning["path"], warning["line"], warning["message"]
        )
    logger.info(
        "Documents written: %d, without docs: %d, failed: %d, callout warnings: %d",
        stats.documents_written,
        stats.files_without_docs,
        stats.files_failed,
        stats.callout_warnings,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = parse_args(argv)
    configure_structured_logging(getattr(logging, args.log_level))
    run_id = set_run_id()

    logger.info("*" * 80)
    logger.info(" Literate Documentation Build")
    logger.info("*" * 80)

    try:
        config = build_config(args)
        logger.info("Input root       : %s", config.input_root)
        logger.info("Output root      : %s", config.output_root)
        logger.info("Output format    : %s", config.output_format.name)
        logger.info("Symbols          : %s", dict(config.symbols))
        stats = emit_tree(config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIGURATION_ERROR

    with phase_scope("report"):
        log_summary(stats)
        report = stats.to_dict()
        report["status"] = run_status(stats.exit_code)
        report["input_root"] = config.input_root
        report["output_root"] = config.output_root
        try:
            path = write_run_report(report, run_id=run_id, output_dir=args.report_dir)
            logger.info("Run report written to %s", path)
        except OSError as e:
            logger.warning("Could not write run report: %s", e)

    logger.info("*" * 80)
    logger.info(" Build finished: %s", "success" if stats.exit_code == 0 else "some files skipped")
    logger.info("*" * 80)

    return stats.exit_code


if __name__ == "__main__":
    sys.exit(main())
