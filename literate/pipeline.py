"""
Per-file extraction pipeline.

Scanner -> conditional resolver -> visibility filter -> callout resolver ->
document assembler, for one source file held in memory. No state is shared
between files, so calls may run concurrently.
"""

import logging
from typing import List, Optional, Tuple

from literate.assembler import assemble
from literate.build_config import DocBuildConfig
from literate.callouts import resolve_callouts
from literate.conditionals import resolve_conditionals
from literate.errors import StructuralParseError
from literate.formats import render_document
from literate.models import CalloutMismatch, Document, SourceFile
from literate.scanner import scan
from literate.visibility import apply_visibility

logger = logging.getLogger(__name__)


def build_document(
    source: SourceFile,
    config: Optional[DocBuildConfig] = None,
) -> Tuple[Optional[Document], List[CalloutMismatch]]:
    """Run every stage over one source file.

    Args:
        source: The file's relative path and decoded text.
        config: Build configuration; defaults apply when None.

    Returns:
        A tuple of (document or None, callout warnings). The document is None
        when the file has no documentation block left after filtering.

    Raises:
        StructuralParseError: If the file is malformed; located in the file.
        ConfigurationError: If a directive uses a symbol the build does not define.
    """
    config = config or DocBuildConfig()
    try:
        segments = scan(source.text, config.hide)
        segments = resolve_conditionals(
            segments, config.symbols, config.undefined_symbols_false
        )
        segments = apply_visibility(segments, config.noise)
        segments, mismatches = resolve_callouts(segments, config.output_format)
    except StructuralParseError as exc:
        raise exc.with_path(source.relative_path) from exc

    document = assemble(source.relative_path, segments, config, mismatches)
    if document is not None:
        logger.debug(
            "Assembled %s: %d prose blocks, %d code blocks",
            source.relative_path,
            len(document.prose_blocks),
            len(document.code_blocks),
        )
    return document, mismatches


def render_source(source: SourceFile, config: Optional[DocBuildConfig] = None) -> Optional[str]:
    """Convenience wrapper returning the rendered document text, or None."""
    config = config or DocBuildConfig()
    document, _ = build_document(source, config)
    if document is None:
        return None
    return render_document(document, config.output_format)
