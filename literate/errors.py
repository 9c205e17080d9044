"""Per-file error types for literate documentation extraction."""

from typing import Optional


class StructuralParseError(ValueError):
    """A source file cannot be processed; the file is skipped, the run continues.

    Raised for unterminated documentation blocks, unbalanced conditional
    directives, ambiguous hidden regions and I/O failures on the file.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        path: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.path or "<source>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"

    def with_path(self, path: str) -> "StructuralParseError":
        """Return a copy of this error located in ``path``."""
        return StructuralParseError(self.message, line=self.line, path=path)

    def to_dict(self) -> dict:
        return {"path": self.path, "line": self.line, "message": self.message}
