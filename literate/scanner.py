"""
Lexical scanning of annotated source files.

Turns raw file text into an ordered sequence of segments covering the whole
input: documentation blocks (prose), conditional directives, hidden code and
ordinary code lines. Concatenating the ``raw`` text of the segments gives back
the original file exactly.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from literate.build_config import HideConfig
from literate.config import (
    DIRECTIVE_BEGIN,
    DIRECTIVE_END,
    DIRECTIVE_RE,
    DOC_BLOCK_CLOSER,
    DOC_BLOCK_OPENER,
    DOC_OPENER_RE,
    HIDE_SCOPE_NEXT_DECLARATION,
)
from literate.errors import StructuralParseError
from literate.models import Segment, SegmentKind

logger = logging.getLogger(__name__)

_LITERAL_RE = re.compile(
    r'@"(?:[^"]|"")*"'          # verbatim string
    r'|"(?:\\.|[^"\\])*"'       # regular string
    r"|'(?:\\.|[^'\\])*'"       # char literal
    r"|/\*.*?\*/"               # inline block comment
)
_LINE_COMMENT_RE = re.compile(r"//.*$")
_MARKER_LINE_RE = re.compile(r"^\s*//\s*(?P<token>[\w-]+)\s*$")
_TRAILING_MARKER_RE = re.compile(r"^(?P<code>.*?\S)\s*//\s*(?P<token>[\w-]+)\s*$")
_CONTINUATION_RE = re.compile(r"^[ \t]*\* ?")


def _content(raw_line: str) -> str:
    """Return a physical line without its terminator."""
    parts = raw_line.splitlines()
    return parts[0] if parts else ""


def strip_code_noise(line: str) -> str:
    """Remove string/char literals and comments so braces can be counted."""
    return _LINE_COMMENT_RE.sub("", _LITERAL_RE.sub('""', line))


def _count_braces(line: str) -> Tuple[int, int]:
    code = strip_code_noise(line)
    return code.count("{"), code.count("}")


def _marker_token(line: str, tokens: Sequence[str]) -> Optional[str]:
    match = _MARKER_LINE_RE.match(line)
    if match and match.group("token").lower() in tokens:
        return match.group("token").lower()
    return None


def has_trailing_hide(line: str, hide: HideConfig) -> bool:
    """True for a code line ending with a hide-marker comment, e.g. ``x(); // hide``."""
    match = _TRAILING_MARKER_RE.match(line)
    if not match or match.group("code").lstrip().startswith("//"):
        return False
    return match.group("token").lower() in _lowered(hide.markers)


def _lowered(tokens: Sequence[str]) -> Tuple[str, ...]:
    return tuple(t.lower() for t in tokens)


class _HiddenRegion:
    """Tracks one open hidden region while lines are being scanned.

    An implicit region counts braces to find where it ends. Scanning happens
    before conditional resolution, so every ``#if`` branch inside the region
    restarts from the depth the ``#if`` opened at and each branch must leave
    the region at the same depth. A declaration that ends inside a branch
    keeps the region open until the matching ``#endif``.
    """

    def __init__(self, explicit: bool, scope: str, line: int):
        self.explicit = explicit
        self.scope = scope
        self.line = line
        self.depth = 0
        self.opened = False
        self.closed = False
        self.ending = False
        # [depth at #if, depth the first branch ended at]
        self.branches: List[List[Optional[int]]] = []

    def _finish(self) -> None:
        if self.branches:
            self.ending = True
        else:
            self.closed = True

    def consume(self, line: str, lineno: int) -> bool:
        """Feed one code line; returns whether that line is hidden."""
        if self.explicit:
            return True
        opens, closes = _count_braces(line)
        if self.depth + opens - closes < 0:
            if self.branches:
                raise StructuralParseError(
                    f"block enclosing hidden region opened at line {self.line} "
                    "closes inside a conditional branch",
                    line=lineno,
                )
            # The block enclosing the marker ends here; its brace stays visible
            self.closed = True
            return False
        self.depth += opens - closes
        if self.scope == HIDE_SCOPE_NEXT_DECLARATION:
            if opens:
                self.opened = True
            if self.opened and self.depth == 0:
                self._finish()
            elif not self.opened and strip_code_noise(line).rstrip().endswith(";"):
                self._finish()
        return True

    def on_directive(self, name: str, lineno: int) -> None:
        """Follow ``#if``/``#elif``/``#else``/``#endif`` lines inside the region."""
        if self.explicit:
            return
        if name == DIRECTIVE_BEGIN:
            self.branches.append([self.depth, None])
            return
        if not self.branches:
            if name == DIRECTIVE_END:
                # Closes a conditional opened before the hide marker
                return
            raise StructuralParseError(
                f"#{name} of a conditional opened before the hidden region at line {self.line}",
                line=lineno,
            )
        frame = self.branches[-1]
        if frame[1] is None:
            frame[1] = self.depth
        elif frame[1] != self.depth:
            raise StructuralParseError(
                f"conditional branches leave hidden region opened at line {self.line} "
                "at different brace depths",
                line=lineno,
            )
        if name == DIRECTIVE_END:
            self.branches.pop()
            self.depth = frame[1]
            if not self.branches and self.ending:
                self.closed = True
        else:
            self.depth = frame[0]

    def on_doc_block(self, line: int) -> None:
        if self.depth > 0:
            raise StructuralParseError(
                f"documentation block inside hidden region opened at line {self.line}",
                line=line,
            )
        if self.scope == HIDE_SCOPE_NEXT_DECLARATION:
            self.closed = True


def _resume_ahead(lines: List[str], start: int, hide: HideConfig) -> bool:
    """Look ahead for a resume marker before the next hide marker or doc block."""
    hide_tokens = _lowered(hide.markers)
    resume_tokens = _lowered(hide.resume_markers)
    for raw_line in lines[start:]:
        line = _content(raw_line)
        if DOC_OPENER_RE.match(line) or _marker_token(line, hide_tokens):
            return False
        if _marker_token(line, resume_tokens):
            return True
    return False


def clean_doc_body(parts: List[str]) -> str:
    """Strip per-line comment markers from a documentation block body.

    ``parts[0]`` is the text after the opener; later parts are continuation
    lines whose leading whitespace, ``*`` and one space are dropped. Leading
    and trailing blank lines are trimmed, interior blank lines kept.
    """
    cleaned: List[str] = []
    for idx, part in enumerate(parts):
        if idx == 0:
            text = part.strip()
        elif _CONTINUATION_RE.match(part):
            text = _CONTINUATION_RE.sub("", part, count=1).rstrip()
        else:
            text = part.strip()
        cleaned.append(text)

    while cleaned and not cleaned[0].strip():
        cleaned.pop(0)
    while cleaned and not cleaned[-1].strip():
        cleaned.pop()
    return "\n".join(cleaned)


def _read_doc_block(lines: List[str], start: int) -> Tuple[Segment, Optional[Segment], int]:
    """Read a documentation block opening on ``lines[start]``.

    Returns:
        A tuple of (prose segment, trailing code segment or None, index of the
        next unread line).

    Raises:
        StructuralParseError: If the block is never closed.
    """
    first = _content(lines[start])
    col = first.index(DOC_BLOCK_OPENER) + len(DOC_BLOCK_OPENER)

    parts: List[str] = []
    if first[col:col + 1] == "/":
        # `/**/`: the opener's second star doubles as the closer's
        end_line, end_col = start, col + 1
        parts.append("")
    else:
        end_line = start
        while True:
            line = _content(lines[end_line])
            offset = col if end_line == start else 0
            close = line.find(DOC_BLOCK_CLOSER, offset)
            if close >= 0:
                parts.append(line[offset:close])
                end_col = close + len(DOC_BLOCK_CLOSER)
                break
            parts.append(line[offset:])
            end_line += 1
            if end_line >= len(lines):
                raise StructuralParseError("unterminated documentation block", line=start + 1)

    closing_raw = lines[end_line]
    head, tail = closing_raw[:end_col], closing_raw[end_col:]
    raw = "".join(lines[start:end_line]) + head

    trailing: Optional[Segment] = None
    if tail.strip():
        trailing = Segment(
            kind=SegmentKind.CODE,
            text=_content(tail),
            raw=tail,
            line=end_line + 1,
            end_line=end_line + 1,
        )
    else:
        raw += tail

    prose = Segment(
        kind=SegmentKind.PROSE,
        text=clean_doc_body(parts),
        raw=raw,
        line=start + 1,
        end_line=end_line + 1,
    )
    return prose, trailing, end_line + 1


def scan(text: str, hide: Optional[HideConfig] = None) -> List[Segment]:
    """Split source text into ordered, gap-free segments.

    Args:
        text: Full source file content.
        hide: Hidden-region markers and scope rule; defaults apply when None.

    Returns:
        Segments in document order.

    Raises:
        StructuralParseError: For an unterminated documentation block or an
            ambiguous hidden region.
    """
    hide = hide or HideConfig()
    hide_tokens = _lowered(hide.markers)
    resume_tokens = _lowered(hide.resume_markers)

    lines = text.splitlines(keepends=True)
    segments: List[Segment] = []
    region: Optional[_HiddenRegion] = None

    def code_segment(kind: SegmentKind, index: int) -> Segment:
        raw_line = lines[index]
        return Segment(kind=kind, text=_content(raw_line), raw=raw_line,
                       line=index + 1, end_line=index + 1)

    i = 0
    while i < len(lines):
        line = _content(lines[i])
        lineno = i + 1

        if DOC_OPENER_RE.match(line):
            if region is not None:
                region.on_doc_block(lineno)
                if region.closed:
                    region = None
            prose, trailing, i = _read_doc_block(lines, i)
            segments.append(prose)
            if trailing is not None:
                segments.append(trailing)
            continue

        directive = DIRECTIVE_RE.match(line)
        if directive:
            if region is not None:
                region.on_directive(directive.group("name"), lineno)
                if region.closed:
                    region = None
            segments.append(code_segment(SegmentKind.DIRECTIVE, i))
        elif _marker_token(line, hide_tokens):
            if region is not None:
                raise StructuralParseError(
                    f"hide marker inside hidden region opened at line {region.line}",
                    line=lineno,
                )
            region = _HiddenRegion(
                explicit=_resume_ahead(lines, i + 1, hide),
                scope=hide.scope,
                line=lineno,
            )
            segments.append(code_segment(SegmentKind.HIDDEN, i))
        elif _marker_token(line, resume_tokens):
            if region is None:
                raise StructuralParseError("resume marker without a hidden region", line=lineno)
            region = None
            segments.append(code_segment(SegmentKind.HIDDEN, i))
        elif region is not None:
            hidden = region.consume(line, lineno)
            segments.append(code_segment(SegmentKind.HIDDEN if hidden else SegmentKind.CODE, i))
            if region.closed:
                region = None
        elif has_trailing_hide(line, hide):
            segments.append(code_segment(SegmentKind.HIDDEN, i))
        else:
            segments.append(code_segment(SegmentKind.CODE, i))
        i += 1

    logger.debug("Scanned %d lines into %d segments", len(lines), len(segments))
    return segments


def reassemble(segments: List[Segment]) -> str:
    """Concatenate raw segment text; the inverse of ``scan``."""
    return "".join(segment.raw for segment in segments)
