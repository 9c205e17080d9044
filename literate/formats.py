"""
Output format conventions and Document rendering.

An output format supplies the file extension, the code fence and the callout
syntax. AsciiDoc is the native target: its source blocks understand ``<n>``
callouts directly. Markdown follows the code-annotation convention of
mkdocs-material, ``(n)`` in the code and an ordered list after the block.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping

from literate.models import Block, Document


@dataclass(frozen=True)
class OutputFormat:
    """Fence and callout syntax for one documentation format."""

    name: str
    extension: str
    code_open: str
    code_close: str
    callout_marker: str
    callout_item: str
    literal_marker: str

    def open_fence(self, language: str) -> str:
        return self.code_open.format(language=language)

    def marker(self, number: int) -> str:
        return self.callout_marker.format(number=number)

    def item(self, number: int, text: str) -> str:
        return self.callout_item.format(number=number, text=text).rstrip()

    def literal(self, number: int) -> str:
        return self.literal_marker.format(number=number)


ASCIIDOC = OutputFormat(
    name="asciidoc",
    extension=".asciidoc",
    code_open="[source,{language}]\n----",
    code_close="----",
    callout_marker="<{number}>",
    callout_item="<{number}> {text}",
    literal_marker="\\<{number}>",
)

MARKDOWN = OutputFormat(
    name="markdown",
    extension=".md",
    code_open="```{language}",
    code_close="```",
    callout_marker="({number})",
    callout_item="{number}. {text}",
    literal_marker="<{number}>",
)

BUILTIN_FORMATS: Dict[str, OutputFormat] = {
    ASCIIDOC.name: ASCIIDOC,
    MARKDOWN.name: MARKDOWN,
    "adoc": ASCIIDOC,
    "md": MARKDOWN,
}


def resolve_output_format(spec: Any) -> OutputFormat:
    """Build an OutputFormat from a name or a mapping of overrides.

    A mapping may name a ``base`` format (default asciidoc) and override any
    of its fields, e.g. ``{"base": "asciidoc", "extension": ".adoc"}``.

    Raises:
        ValueError: For an unknown format name or unknown override keys.
    """
    if isinstance(spec, OutputFormat):
        return spec
    if isinstance(spec, str):
        try:
            return BUILTIN_FORMATS[spec.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Unknown output format '{spec}'. "
                f"Expected one of: {sorted(BUILTIN_FORMATS)}"
            ) from None
    if isinstance(spec, Mapping):
        overrides = dict(spec)
        base = resolve_output_format(overrides.pop("base", ASCIIDOC.name))
        known = {f.name for f in fields(OutputFormat)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown output format keys: {sorted(unknown)}")
        return replace(base, **{k: str(v) for k, v in overrides.items()})
    raise ValueError(f"output_format must be a name or mapping, got {type(spec).__name__}")


def render_block(block: Block, output_format: OutputFormat) -> str:
    """Render one block.

    An empty prose block renders as an empty string and is left out of the
    written document. It still separates the code around it, which shows up
    as two fenced samples instead of one.
    """
    if block.kind == "code":
        return "\n".join([
            output_format.open_fence(block.language or ""),
            block.text,
            output_format.code_close,
        ])
    if block.kind == "callouts":
        return "\n".join(
            output_format.item(c.number, c.explanation) for c in block.callouts
        )
    return block.text


def render_document(document: Document, output_format: OutputFormat) -> str:
    """Render a Document to the text written to disk.

    Blocks are separated by one blank line and the result ends with a single
    newline, so rendering is deterministic for a given Document.
    """
    chunks: List[str] = []
    for block in document.blocks:
        rendered = render_block(block, output_format)
        if rendered:
            chunks.append(rendered)
    return "\n\n".join(chunks) + "\n"
