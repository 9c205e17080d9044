"""
Visibility filtering of scanned segments.

Removes hidden code and test-harness noise so that only the
documentation-facing subset of the code reaches the assembler. The pass
only removes or rewrites segments; it never reorders them.
"""

import logging
import re
from dataclasses import replace
from typing import List, Optional, Pattern

from literate.build_config import NoiseConfig
from literate.config import SINGLE_ATTRIBUTE_RE
from literate.models import Segment, SegmentKind

logger = logging.getLogger(__name__)


def _non_runnable_re(noise: NoiseConfig) -> Optional[Pattern[str]]:
    if not noise.non_runnable_markers:
        return None
    alternatives = "|".join(re.escape(m) for m in noise.non_runnable_markers)
    return re.compile(rf"\s*//\s*(?:{alternatives})\s*$", re.IGNORECASE)


def _is_harness_attribute(segment: Segment, noise: NoiseConfig) -> bool:
    match = SINGLE_ATTRIBUTE_RE.match(segment.text)
    return bool(match) and match.group("name") in noise.attributes


def _precedes_declaration(segments: List[Segment], index: int, noise: NoiseConfig) -> bool:
    """True when the next meaningful segment after ``index`` is a code line."""
    for following in segments[index + 1:]:
        if following.kind is SegmentKind.HIDDEN:
            continue
        if not following.is_code:
            return False
        if following.is_blank:
            return False
        if _is_harness_attribute(following, noise):
            continue
        return True
    return False


def mark_noise(segments: List[Segment], noise: NoiseConfig) -> List[Segment]:
    """Flag harness attribute lines and framing lines with ``noise=True``."""
    line_patterns = [re.compile(p) for p in noise.line_patterns]
    marked: List[Segment] = []
    for index, segment in enumerate(segments):
        if segment.is_code and (
            (_is_harness_attribute(segment, noise)
             and _precedes_declaration(segments, index, noise))
            or any(p.match(segment.text) for p in line_patterns)
        ):
            segment = replace(segment, noise=True)
        marked.append(segment)
    return marked


def apply_visibility(segments: List[Segment], noise: Optional[NoiseConfig] = None) -> List[Segment]:
    """Remove hidden and noise segments and strip non-runnable markers.

    Args:
        segments: Segments after conditional resolution.
        noise: Noise pattern table; defaults apply when None.

    Returns:
        The documentation-facing segments in their original order.
    """
    noise = noise or NoiseConfig()
    non_runnable = _non_runnable_re(noise)

    visible: List[Segment] = []
    dropped = 0
    for segment in mark_noise(segments, noise):
        if segment.kind is SegmentKind.HIDDEN or segment.noise:
            dropped += 1
            continue
        if segment.is_code and non_runnable is not None:
            stripped = non_runnable.sub("", segment.text)
            if stripped != segment.text:
                segment = replace(segment, text=stripped)
        visible.append(segment)

    logger.debug("Visibility filter dropped %d segments", dropped)
    return visible
