"""
Configuration constants for literate documentation extraction.

Defines the annotation syntax recognized in source files and the defaults
used when a build configuration leaves a setting out. Environment variables
are loaded from a .env file at module import time via python-dotenv.
"""

import os
import re
from typing import Dict, Pattern, Set, Tuple

from dotenv import load_dotenv

from core.startup_config import env_int

# ---------------------------------------------------------------------------
# Load .env file (idempotent; does nothing if already loaded or missing)
# ---------------------------------------------------------------------------
load_dotenv()

# ---------------------------------------------------------------------------
# Documentation block syntax
# ---------------------------------------------------------------------------
DOC_BLOCK_OPENER: str = "/**"
DOC_BLOCK_CLOSER: str = "*/"

# Opener must be the first non-blank text on its line
DOC_OPENER_RE: Pattern[str] = re.compile(r"^[ \t]*/\*\*")

# ---------------------------------------------------------------------------
# Conditional-compilation directives
# ---------------------------------------------------------------------------
DIRECTIVE_RE: Pattern[str] = re.compile(
    r"^[ \t]*#[ \t]*(?P<name>if|elif|else|endif)\b(?P<condition>.*)$"
)
DIRECTIVE_BEGIN: str = "if"
DIRECTIVE_ELIF: str = "elif"
DIRECTIVE_ELSE: str = "else"
DIRECTIVE_END: str = "endif"

# Identifiers that are literals rather than configurable symbols
CONDITION_LITERALS: Dict[str, bool] = {
    "true": True,
    "false": False,
}

# ---------------------------------------------------------------------------
# Hidden-region markers (single-line comments, matched case-insensitively)
# ---------------------------------------------------------------------------
DEFAULT_HIDE_MARKERS: Tuple[str, ...] = ("hide",)
DEFAULT_RESUME_MARKERS: Tuple[str, ...] = ("show",)

HIDE_SCOPE_NEXT_DECLARATION: str = "next_declaration"
HIDE_SCOPE_ENCLOSING_BLOCK: str = "enclosing_block"
HIDE_SCOPES: Set[str] = {
    HIDE_SCOPE_NEXT_DECLARATION,
    HIDE_SCOPE_ENCLOSING_BLOCK,
}
DEFAULT_HIDE_SCOPE: str = HIDE_SCOPE_NEXT_DECLARATION

# ---------------------------------------------------------------------------
# Structural noise stripped by the visibility filter
# ---------------------------------------------------------------------------
# Test-harness attributes that carry no meaning for the reader
DEFAULT_NOISE_ATTRIBUTES: Tuple[str, ...] = (
    "U",
    "I",
    "IntegrationOnly",
    "Fact",
)

# Trailing comments marking a line as intentionally non-runnable
DEFAULT_NON_RUNNABLE_MARKERS: Tuple[str, ...] = (
    "norun",
    "not-runnable",
)

# Whole lines that only frame the sample (imports, namespace declarations)
DEFAULT_NOISE_LINE_PATTERNS: Tuple[str, ...] = (
    r"^\s*using\s+(static\s+)?[\w.]+(\s*=\s*[\w.<>]+)?\s*;\s*$",
    r"^\s*namespace\s+[\w.]+\s*;?\s*$",
)

SINGLE_ATTRIBUTE_RE: Pattern[str] = re.compile(
    r"^\s*\[\s*(?P<name>\w+)\s*(\(.*\))?\s*\]\s*$"
)

# ---------------------------------------------------------------------------
# Callouts
# ---------------------------------------------------------------------------
# `<n>` inside a single-line comment, optionally followed by its explanation
CALLOUT_COMMENT_RE: Pattern[str] = re.compile(
    r"(?P<prefix>\s*//\s*)(?P<markers>(?:<\d+>\s*)+)(?P<explanation>.*)$"
)
CALLOUT_MARKER_RE: Pattern[str] = re.compile(r"<(?P<number>\d+)>")

# Prose list items: numbered forms carry a literal callout number
NUMBERED_ITEM_RE: Pattern[str] = re.compile(
    r"^(?P<indent>\s*)(?:<(?P<angle>\d+)>|(?P<plain>\d+)[.)])\s+(?P<body>.*)$"
)
UNNUMBERED_ITEM_RE: Pattern[str] = re.compile(
    r"^(?P<indent>\s*)(?:\.|\*|-)\s+(?P<body>.*)$"
)

# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------
DEFAULT_HOST_LANGUAGE: str = "csharp"
LANGUAGE_TAG_RE: Pattern[str] = re.compile(
    r"^\s*\[source\s*,\s*(?P<language>[^\],\s]+)\s*(?:,[^\]]*)?\]\s*$"
)
STRUCTURAL_LINE_RE: Pattern[str] = re.compile(r"^[\s{}();]*$")
DEFAULT_TAB_WIDTH: int = 4

# ---------------------------------------------------------------------------
# Tree emission
# ---------------------------------------------------------------------------
DEFAULT_FILE_PATTERNS: Tuple[str, ...] = ("*.doc.cs",)
# Override with LITERATE_OUTPUT_FORMAT in the environment
DEFAULT_OUTPUT_FORMAT: str = os.getenv("LITERATE_OUTPUT_FORMAT", "asciidoc")
DEFAULT_ENCODING: str = "utf-8"

SKIP_DIRECTORIES: Set[str] = {
    "bin",
    "obj",
    "node_modules",
    "packages",
    "__pycache__",
    "build",
    "dist",
    "out",
}

# Worker pool size; override with LITERATE_WORKERS in the environment
DEFAULT_WORKERS: int = env_int("LITERATE_WORKERS", 4)
