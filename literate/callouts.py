"""
Callout resolution.

Links ``<n>`` markers written in code comments to their explanations. An
explanation either follows the marker in the same comment
(``// <1> synonymous with the previous delegate``) or is an item of the first
list in the prose that directly follows the code block. Marker numbers are
scoped to one contiguous code block.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from literate.config import (
    CALLOUT_COMMENT_RE,
    CALLOUT_MARKER_RE,
    NUMBERED_ITEM_RE,
    UNNUMBERED_ITEM_RE,
)
from literate.formats import ASCIIDOC, OutputFormat
from literate.models import Callout, CalloutMismatch, Segment, iter_runs

logger = logging.getLogger(__name__)


@dataclass
class _ListItem:
    index: int
    number: Optional[int]
    indent: str
    body: str


def _match_item(line: str) -> Optional[_ListItem]:
    match = NUMBERED_ITEM_RE.match(line)
    if match:
        number = int(match.group("angle") or match.group("plain"))
        return _ListItem(-1, number, match.group("indent"), match.group("body").strip())
    match = UNNUMBERED_ITEM_RE.match(line)
    if match:
        return _ListItem(-1, None, match.group("indent"), match.group("body").strip())
    return None


def find_first_list(lines: List[str]) -> List[_ListItem]:
    """Return the items of the first list in a prose body.

    Blank lines between items do not end the list; any other line does.
    """
    items: List[_ListItem] = []
    for index, line in enumerate(lines):
        item = _match_item(line)
        if item is not None:
            item.index = index
            items.append(item)
            continue
        if items and not line.strip():
            continue
        if items:
            break
    return items


def _explanation_lookup(items: List[_ListItem]) -> Dict[int, _ListItem]:
    """Map callout numbers to items: literal numbers if present, else position."""
    if any(item.number is not None for item in items):
        return {item.number: item for item in items if item.number is not None}
    return {position: item for position, item in enumerate(items, start=1)}


def _collect_markers(run: List[Segment]) -> List[Tuple[int, List[int], str]]:
    """Return ``(segment index, marker numbers, inline explanation)`` per commented line."""
    found = []
    for index, segment in enumerate(run):
        match = CALLOUT_COMMENT_RE.search(segment.text)
        if not match:
            continue
        numbers = [int(n) for n in CALLOUT_MARKER_RE.findall(match.group("markers"))]
        found.append((index, numbers, match.group("explanation").strip()))
    return found


def _resolve_run(
    run: List[Segment],
    prose: Optional[Segment],
    output_format: OutputFormat,
) -> Tuple[List[Segment], Optional[Segment], List[CalloutMismatch]]:
    markers = _collect_markers(run)
    if not markers:
        return run, prose, []

    prose_lines = prose.text.split("\n") if prose is not None else []
    lookup = _explanation_lookup(find_first_list(prose_lines))
    claimed: Dict[int, _ListItem] = {}
    mismatches: List[CalloutMismatch] = []
    resolved_run = list(run)

    for index, numbers, explanation in markers:
        segment = run[index]
        rendered: List[str] = []
        linked: List[Callout] = []
        for number in numbers:
            if explanation:
                linked.append(Callout(number, segment.line, explanation, "inline"))
                rendered.append(output_format.marker(number))
            elif number in lookup:
                claimed[number] = lookup[number]
                linked.append(Callout(number, segment.line, lookup[number].body, "list"))
                rendered.append(output_format.marker(number))
            else:
                mismatches.append(CalloutMismatch(
                    number=number,
                    line=segment.line,
                    message=f"callout <{number}> has no matching explanation",
                ))
                rendered.append(output_format.literal(number))

        match = CALLOUT_COMMENT_RE.search(segment.text)
        text = segment.text[:match.start("markers")] + " ".join(rendered)
        resolved_run[index] = replace(segment, text=text, callouts=tuple(linked))

    if claimed and prose is not None:
        for number, item in claimed.items():
            prose_lines[item.index] = item.indent + output_format.item(number, item.body)
        prose = replace(prose, text="\n".join(prose_lines))

    return resolved_run, prose, mismatches


def resolve_callouts(
    segments: List[Segment],
    output_format: OutputFormat = ASCIIDOC,
) -> Tuple[List[Segment], List[CalloutMismatch]]:
    """Resolve callout markers in every contiguous code block.

    Args:
        segments: Visible segments in document order.
        output_format: Supplies the marker and callout-item conventions.

    Returns:
        A tuple of (segments with rendered markers, mismatch warnings). A
        list in the following prose is rewritten only when at least one
        marker resolved to it.
    """
    runs = [list(run) for _, run in iter_runs(segments)]
    is_code = [run[0].is_code for run in runs]
    mismatches: List[CalloutMismatch] = []

    for idx, run in enumerate(runs):
        if not is_code[idx]:
            continue
        has_prose_after = idx + 1 < len(runs) and runs[idx + 1][0].is_prose
        prose = runs[idx + 1][0] if has_prose_after else None
        resolved, prose, run_mismatches = _resolve_run(run, prose, output_format)
        runs[idx] = resolved
        if has_prose_after:
            runs[idx + 1][0] = prose
        mismatches.extend(run_mismatches)

    for mismatch in mismatches:
        logger.warning("Unresolved callout at %s", mismatch)

    return [segment for run in runs for segment in run], mismatches
