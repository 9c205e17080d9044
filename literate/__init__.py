"""
Literate documentation engine.

Extracts `/** ... */` documentation blocks and the code around them from
annotated C# sources and assembles one AsciiDoc or Markdown document per
file, honouring conditional-compilation regions, hidden code and callouts.
"""

from literate.models import (
    Block,
    Callout,
    CalloutMismatch,
    Document,
    FileResult,
    Segment,
    SegmentKind,
    SourceFile,
)
from literate.errors import StructuralParseError
from literate.build_config import DocBuildConfig, HideConfig, NoiseConfig, load_build_config
from literate.formats import ASCIIDOC, MARKDOWN, OutputFormat, render_document
from literate.scanner import scan, reassemble
from literate.conditionals import evaluate_condition, referenced_symbols, resolve_conditionals
from literate.visibility import apply_visibility, mark_noise
from literate.callouts import resolve_callouts
from literate.assembler import assemble
from literate.pipeline import build_document, render_source
from literate.emitter import (
    EmitStats,
    discover_source_files,
    emit_file,
    emit_tree,
    output_relative_path,
)

__all__ = [
    # Data models
    "Block",
    "Callout",
    "CalloutMismatch",
    "Document",
    "FileResult",
    "Segment",
    "SegmentKind",
    "SourceFile",
    "StructuralParseError",
    # Configuration
    "DocBuildConfig",
    "HideConfig",
    "NoiseConfig",
    "load_build_config",
    "ASCIIDOC",
    "MARKDOWN",
    "OutputFormat",
    # Pipeline stages
    "scan",
    "reassemble",
    "evaluate_condition",
    "referenced_symbols",
    "resolve_conditionals",
    "apply_visibility",
    "mark_noise",
    "resolve_callouts",
    "assemble",
    "render_document",
    # Orchestration
    "build_document",
    "render_source",
    "EmitStats",
    "discover_source_files",
    "emit_file",
    "emit_tree",
    "output_relative_path",
]
