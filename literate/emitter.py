"""
High-level orchestrator for documentation tree emission.

This module provides the entry points for turning an input tree of annotated
source files into a mirrored tree of documentation files.
"""

import fnmatch
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence

from core.startup_config import ConfigurationError, validate_roots
from core.structured_logging import copy_log_context, phase_scope, source_scope
from literate.build_config import DocBuildConfig
from literate.conditionals import referenced_symbols
from literate.config import DEFAULT_ENCODING, SKIP_DIRECTORIES
from literate.errors import StructuralParseError
from literate.formats import OutputFormat, render_document
from literate.models import FileResult, SourceFile
from literate.pipeline import build_document
from literate.scanner import scan

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class EmitStats:
    """Statistics for a documentation build."""

    def __init__(self):
        self.files_discovered = 0
        self.documents_written = 0
        self.files_without_docs = 0
        self.files_failed = 0
        self.callout_warnings = 0
        self.failures: List[Dict[str, object]] = []
        self.warnings: List[Dict[str, object]] = []

    def record(self, result: FileResult) -> None:
        """Fold one file's outcome into the totals."""
        if result.error is not None:
            self.files_failed += 1
            self.failures.append(result.error.to_dict())
        elif result.written:
            self.documents_written += 1
        else:
            self.files_without_docs += 1
        for warning in result.warnings:
            self.callout_warnings += 1
            self.warnings.append({"path": result.relative_path, **warning.to_dict()})

    @property
    def exit_code(self) -> int:
        return 1 if self.files_failed else 0

    def to_dict(self) -> Dict[str, object]:
        """Convert stats to dictionary."""
        return {
            "files_discovered": self.files_discovered,
            "documents_written": self.documents_written,
            "files_without_docs": self.files_without_docs,
            "files_failed": self.files_failed,
            "callout_warnings": self.callout_warnings,
            "failures": sorted(self.failures, key=lambda f: (str(f["path"]), f["line"] or 0)),
            "warnings": sorted(self.warnings, key=lambda w: (str(w["path"]), w["line"])),
        }

    def __str__(self) -> str:
        return (
            f"EmitStats(discovered={self.files_discovered}, "
            f"written={self.documents_written}, no_docs={self.files_without_docs}, "
            f"failed={self.files_failed}, callout_warnings={self.callout_warnings})"
        )


def discover_source_files(directory: str, patterns: Sequence[str]) -> List[str]:
    """Recursively discover source files whose name matches one of ``patterns``.

    Args:
        directory: Root directory to search.
        patterns: Filename glob patterns, e.g. ``*.doc.cs``.

    Returns:
        Sorted list of absolute paths.
    """
    found = []
    directory = os.path.abspath(directory)

    logger.info("Discovering source files in %s", directory)

    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(
            d for d in dirs if not d.startswith(".") and d not in SKIP_DIRECTORIES
        )
        for name in files:
            if any(fnmatch.fnmatch(name, pattern) for pattern in patterns):
                found.append(os.path.join(root, name))

    logger.info("Found %d source files", len(found))
    return sorted(found)


def kebab_case(name: str) -> str:
    """``WorkingWithCertificates`` -> ``working-with-certificates``."""
    name = _CAMEL_BOUNDARY_RE.sub("-", name)
    return re.sub(r"[\s_]+", "-", name).lower()


def _strip_source_suffix(name: str, patterns: Sequence[str]) -> str:
    suffixes = [
        p[1:] for p in patterns
        if p.startswith("*") and not any(c in p[1:] for c in "*?[")
    ]
    matching = [s for s in suffixes if s and name.endswith(s) and len(s) < len(name)]
    if matching:
        return name[: -len(max(matching, key=len))]
    return PurePosixPath(name).stem


def output_relative_path(
    relative_path: str,
    patterns: Sequence[str],
    output_format: OutputFormat,
    kebab_case_paths: bool = False,
) -> str:
    """Map an input path to its mirrored documentation path.

    ``ClientConcepts/Connection/ConfigurationOptions.doc.cs`` becomes
    ``ClientConcepts/Connection/ConfigurationOptions.asciidoc`` (or
    ``client-concepts/connection/configuration-options.asciidoc`` with
    ``kebab_case_paths``).
    """
    parts = list(PurePosixPath(relative_path).parts)
    parts[-1] = _strip_source_suffix(parts[-1], patterns)
    if kebab_case_paths:
        parts = [kebab_case(part) for part in parts]
    parts[-1] += output_format.extension
    return str(PurePosixPath(*parts))


def read_source(path: str, relative_path: str, encoding: str = DEFAULT_ENCODING) -> SourceFile:
    """Read one source file; read failures become StructuralParseError."""
    try:
        text = Path(path).read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise StructuralParseError(f"cannot read file: {exc}", path=relative_path) from exc
    return SourceFile(relative_path=relative_path, text=text, encoding=encoding)


def check_symbols(files: Sequence[str], input_root: str, config: DocBuildConfig) -> None:
    """Reject condition symbols the build does not define, before any file is processed.

    Raises:
        ConfigurationError: Listing each unknown symbol and a file using it.
    """
    if config.undefined_symbols_false:
        return
    unknown: Dict[str, str] = {}
    for path in files:
        relative = Path(path).relative_to(input_root).as_posix()
        try:
            text = Path(path).read_text(encoding=DEFAULT_ENCODING)
        except (OSError, UnicodeDecodeError):
            # Reported as a per-file failure during emission
            continue
        try:
            segments = scan(text, config.hide)
        except StructuralParseError:
            continue
        for symbol in referenced_symbols(segments):
            if symbol not in config.symbols:
                unknown.setdefault(symbol, relative)
    if unknown:
        details = ", ".join(f"{s} (in {p})" for s, p in sorted(unknown.items()))
        raise ConfigurationError(f"Unknown condition symbols: {details}")


def _write_document(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)


def emit_file(
    path: str,
    input_root: str,
    output_root: str,
    config: DocBuildConfig,
) -> FileResult:
    """Process one source file and write its document when it has one.

    Structural errors are captured on the result; configuration errors
    propagate so the caller can abort the run.
    """
    relative = Path(path).relative_to(input_root).as_posix()
    result = FileResult(relative_path=relative)

    with source_scope(relative):
        try:
            source = read_source(path, relative)
            document, warnings = build_document(source, config)
            result.warnings = list(warnings)
            if document is None:
                logger.debug("No documentation blocks; skipping")
                return result

            out_relative = output_relative_path(
                relative, config.file_patterns, config.output_format, config.kebab_case_paths
            )
            out_path = Path(output_root) / out_relative
            try:
                _write_document(out_path, render_document(document, config.output_format))
            except OSError as exc:
                raise StructuralParseError(f"cannot write {out_relative}: {exc}", path=relative) from exc

            result.document = document
            result.output_path = str(out_path)
            result.written = True
            logger.info("Wrote %s", out_relative)

        except StructuralParseError as e:
            logger.error("Skipping file: %s", e)
            result.error = e if e.path else e.with_path(relative)

    return result


def emit_tree(config: DocBuildConfig, workers: Optional[int] = None) -> EmitStats:
    """Generate the documentation tree for every qualifying file.

    Args:
        config: Immutable build configuration.
        workers: Thread pool size; ``config.workers`` when None.

    Returns:
        EmitStats with per-file failures and callout warnings.

    Raises:
        ConfigurationError: If the roots or the symbol table are unusable.
            Raised before any output is written.
    """
    stats = EmitStats()

    with phase_scope("preflight"):
        roots = validate_roots(config.input_root, config.output_root)
        input_root, output_root = roots["input_root"], roots["output_root"]
        files = discover_source_files(input_root, config.file_patterns)
        check_symbols(files, input_root, config)

    stats.files_discovered = len(files)
    if not files:
        logger.warning("No source files found in %s", input_root)
        return stats

    pool_size = workers or config.workers
    logger.info("Processing %d files with %d workers", len(files), pool_size)

    with phase_scope("emit"):
        pool = ThreadPoolExecutor(max_workers=pool_size)
        try:
            futures = {
                pool.submit(copy_log_context().run, emit_file, path, input_root, output_root, config): path
                for path in files
            }
            for future in as_completed(futures):
                try:
                    result = future.result()
                except ConfigurationError:
                    raise
                except Exception as e:
                    path = futures[future]
                    relative = Path(path).relative_to(input_root).as_posix()
                    logger.error("Unexpected error processing %s: %s", relative, e, exc_info=True)
                    result = FileResult(
                        relative_path=relative,
                        error=StructuralParseError(f"unexpected error: {e}", path=relative),
                    )
                stats.record(result)
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    logger.info("Emission complete: %s", stats)
    return stats
