"""
Document assembly.

Interleaves the surviving prose and code segments of one file, in source
order, into a Document: contiguous code becomes one fenced block, prose that
was separated only by blank lines in the source becomes one prose block.
"""

import logging
import textwrap
from typing import List, Optional, Sequence, Tuple

from literate.build_config import DocBuildConfig
from literate.config import LANGUAGE_TAG_RE, STRUCTURAL_LINE_RE
from literate.models import Block, Callout, CalloutMismatch, Document, Segment

logger = logging.getLogger(__name__)


def split_language_tag(text: str) -> Tuple[str, Optional[str]]:
    """Detach a trailing ``[source,<lang>]`` line that declares the next sample's language.

    Returns:
        A tuple of (prose text without the tag, language or None).
    """
    lines = text.split("\n")
    if not lines or not LANGUAGE_TAG_RE.match(lines[-1]):
        return text, None
    language = LANGUAGE_TAG_RE.match(lines[-1]).group("language")
    return "\n".join(lines[:-1]).rstrip(), language


def format_code(run: Sequence[Segment], tab_width: int) -> str:
    """Join code lines, expand tabs, dedent and trim blank edges."""
    lines = [segment.text.expandtabs(tab_width).rstrip() for segment in run]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return textwrap.dedent("\n".join(lines))


def is_structural(code: str) -> bool:
    """True for code made only of braces, parentheses and semicolons."""
    return all(STRUCTURAL_LINE_RE.match(line) for line in code.split("\n"))


def _joins_previous(previous: Optional[Segment], between: List[Segment], current: Segment) -> bool:
    """Whether ``current`` continues the prose of ``previous``.

    True only when every source line between the two blocks survived as a
    blank code line; removed hidden or inactive code keeps them apart. Empty
    documentation blocks are deliberate separators and never join.
    """
    if previous is None or not previous.text or not current.text:
        return False
    if any(not segment.is_blank for segment in between):
        return False
    return len(between) == current.line - previous.end_line - 1


def assemble(
    relative_path: str,
    segments: List[Segment],
    config: Optional[DocBuildConfig] = None,
    warnings: Sequence[CalloutMismatch] = (),
) -> Optional[Document]:
    """Build the Document for one file.

    Args:
        relative_path: Source path relative to the input root.
        segments: Filtered, callout-resolved segments in document order.
        config: Build configuration (host language, tab width, structural-run
            and preamble policy); defaults apply when None.
        warnings: Callout mismatches recorded for the file.

    Returns:
        The Document, or None when no prose segment survived.
    """
    config = config or DocBuildConfig()
    if not any(segment.is_prose for segment in segments):
        logger.debug("No documentation blocks in %s", relative_path)
        return None

    blocks: List[Block] = []
    code_run: List[Segment] = []
    last_prose: Optional[Segment] = None
    pending_language: Optional[str] = None
    linked_callouts: List[Callout] = []

    def flush_code() -> None:
        nonlocal pending_language
        run = list(code_run)
        code_run.clear()
        if last_prose is None and not config.include_preamble:
            # Imports and type openings ahead of the first documentation block
            return
        code = format_code(run, config.tab_width)
        if not code.strip():
            return
        if config.drop_structural_runs and is_structural(code):
            return
        blocks.append(Block(
            kind="code",
            text=code,
            language=pending_language or config.host_language,
        ))
        pending_language = None
        linked = [c for segment in run for c in segment.callouts]
        linked_callouts.extend(linked)
        # List-resolved explanations already render inside the following prose
        callouts = tuple(c for c in linked if c.source == "inline")
        if callouts:
            blocks.append(Block(kind="callouts", callouts=callouts))

    for segment in segments:
        if not segment.is_prose:
            code_run.append(segment)
            continue

        text, language = split_language_tag(segment.text)
        if _joins_previous(last_prose, code_run, segment) and blocks and blocks[-1].kind == "prose":
            code_run.clear()
            merged = blocks[-1].text + "\n\n" + text if text else blocks[-1].text
            blocks[-1] = Block(kind="prose", text=merged)
            # The merged block still opens the sample its earlier tag declared
            language = language or pending_language
        else:
            flush_code()
            blocks.append(Block(kind="prose", text=text))
            if pending_language is not None:
                logger.debug("Language tag [%s] in %s has no code sample", pending_language, relative_path)
        # A tag only applies to the code that directly follows its block
        pending_language = language
        last_prose = segment

    flush_code()

    return Document(
        relative_path=relative_path,
        blocks=tuple(blocks),
        warnings=tuple(warnings),
        callouts=tuple(linked_callouts),
    )
