"""
Data models for literate documentation extraction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from literate.errors import StructuralParseError


class SegmentKind(str, Enum):
    """Kind of a contiguous span of source text."""

    PROSE = "prose"
    CODE = "code"
    DIRECTIVE = "directive"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class SourceFile:
    """One input file handed to the pipeline.

    Attributes:
        relative_path: Path relative to the input root, with ``/`` separators
        text: Decoded file content
        encoding: Encoding the content was decoded with
    """

    relative_path: str
    text: str
    encoding: str = "utf-8"


@dataclass(frozen=True)
class Callout:
    """A numbered link between a code line and its explanation.

    Attributes:
        number: Marker number as written in the code (``<n>``)
        line: 1-indexed source line of the marker
        explanation: Explanation text, rendered as a callout item
        source: ``inline`` when the explanation followed the marker in the
            code comment, ``list`` when it came from the following prose list
    """

    number: int
    line: int
    explanation: str
    source: str = "inline"


@dataclass(frozen=True)
class Segment:
    """A contiguous span of source text tagged with its kind.

    ``raw`` is the exact source span, so concatenating ``raw`` across the
    scanner output reproduces the file. ``text`` is the span's content: the
    documentation body with comment syntax stripped for prose, the line
    without its newline for code, hidden and directive segments.
    """

    kind: SegmentKind
    text: str
    raw: str
    line: int
    end_line: int
    noise: bool = False
    callouts: Tuple[Callout, ...] = ()

    @property
    def is_prose(self) -> bool:
        return self.kind is SegmentKind.PROSE

    @property
    def is_code(self) -> bool:
        return self.kind is SegmentKind.CODE

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass
class ConditionalBranch:
    """Stack frame for an open ``#if`` directive.

    Attributes:
        kept: Whether segments in the current branch are retained
        parent_kept: Whether every enclosing frame is kept
        taken: Whether some branch of this ``#if`` chain has been kept already
        depth: Nesting depth, 1 for the outermost frame
        line: Line of the opening directive
        seen_else: Whether ``#else`` was already consumed
    """

    kept: bool
    parent_kept: bool
    taken: bool
    depth: int
    line: int
    seen_else: bool = False


@dataclass(frozen=True)
class CalloutMismatch:
    """A callout marker with no explanation; recorded as a warning."""

    number: int
    line: int
    message: str

    def to_dict(self) -> dict:
        return {"number": self.number, "line": self.line, "message": self.message}

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"


@dataclass(frozen=True)
class Block:
    """One rendered unit of a Document.

    Attributes:
        kind: ``prose``, ``code`` or ``callouts``
        text: Prose text or code body (without fences)
        language: Language tag for code blocks
        callouts: Callout items for ``callouts`` blocks
    """

    kind: str
    text: str = ""
    language: Optional[str] = None
    callouts: Tuple[Callout, ...] = ()


@dataclass(frozen=True)
class Document:
    """The assembled, ordered blocks for one source file.

    ``callouts`` lists every resolved marker of the rendered code blocks,
    inline and list-linked alike.
    """

    relative_path: str
    blocks: Tuple[Block, ...]
    warnings: Tuple[CalloutMismatch, ...] = ()
    callouts: Tuple[Callout, ...] = ()

    @property
    def prose_blocks(self) -> List[Block]:
        return [b for b in self.blocks if b.kind == "prose"]

    @property
    def code_blocks(self) -> List[Block]:
        return [b for b in self.blocks if b.kind == "code"]


@dataclass
class FileResult:
    """Outcome of processing one source file."""

    relative_path: str
    output_path: Optional[str] = None
    document: Optional[Document] = None
    error: Optional[StructuralParseError] = None
    warnings: List[CalloutMismatch] = field(default_factory=list)
    written: bool = False

    @property
    def skipped(self) -> bool:
        """True when the file produced no document without failing."""
        return self.error is None and self.document is None


def iter_runs(segments: List[Segment]) -> Iterator[Tuple[bool, List[Segment]]]:
    """Group segments into maximal runs of code and non-code.

    Yields ``(is_code_run, segments)`` pairs in document order.
    """
    run: List[Segment] = []
    run_is_code = False
    for segment in segments:
        if run and segment.is_code != run_is_code:
            yield run_is_code, run
            run = []
        run_is_code = segment.is_code
        run.append(segment)
    if run:
        yield run_is_code, run
