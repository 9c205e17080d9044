"""
Conditional-compilation region resolution.

Directive segments are consumed here and never reach the document. Every
other segment is kept only when all open ``#if`` frames select the branch it
sits in under the documentation build's symbol table.
"""

import logging
import re
from typing import List, Mapping, Set, Tuple

from core.startup_config import ConfigurationError
from literate.config import (
    CONDITION_LITERALS,
    DIRECTIVE_BEGIN,
    DIRECTIVE_ELIF,
    DIRECTIVE_ELSE,
    DIRECTIVE_END,
    DIRECTIVE_RE,
)
from literate.errors import StructuralParseError
from literate.models import ConditionalBranch, Segment, SegmentKind

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\s*(?:(?P<ident>[A-Za-z_]\w*)|(?P<op>&&|\|\||==|!=|!|\(|\)))")


class _ConditionSyntaxError(ValueError):
    pass


def _tokenize(condition: str) -> List[Tuple[str, str]]:
    condition = re.sub(r"//.*$", "", condition).strip()
    tokens: List[Tuple[str, str]] = []
    pos = 0
    while pos < len(condition):
        match = _TOKEN_RE.match(condition, pos)
        if not match or match.end() == pos:
            raise _ConditionSyntaxError(f"unexpected text in condition: {condition[pos:]!r}")
        if match.group("ident"):
            tokens.append(("ident", match.group("ident")))
        else:
            tokens.append(("op", match.group("op")))
        pos = match.end()
        while pos < len(condition) and condition[pos].isspace():
            pos += 1
    if not tokens:
        raise _ConditionSyntaxError("empty condition")
    return tokens


class _ConditionParser:
    """Recursive-descent evaluator for C# preprocessor expressions."""

    def __init__(self, tokens: List[Tuple[str, str]], lookup):
        self.tokens = tokens
        self.pos = 0
        self.lookup = lookup

    def parse(self) -> bool:
        value = self._or()
        if self.pos != len(self.tokens):
            raise _ConditionSyntaxError(f"unexpected token {self.tokens[self.pos][1]!r}")
        return value

    def _peek(self) -> str:
        return self.tokens[self.pos][1] if self.pos < len(self.tokens) else ""

    def _take(self) -> Tuple[str, str]:
        if self.pos >= len(self.tokens):
            raise _ConditionSyntaxError("condition ends unexpectedly")
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _or(self) -> bool:
        value = self._and()
        while self._peek() == "||":
            self._take()
            rhs = self._and()
            value = value or rhs
        return value

    def _and(self) -> bool:
        value = self._equality()
        while self._peek() == "&&":
            self._take()
            rhs = self._equality()
            value = value and rhs
        return value

    def _equality(self) -> bool:
        value = self._unary()
        while self._peek() in ("==", "!="):
            op = self._take()[1]
            rhs = self._unary()
            value = (value == rhs) if op == "==" else (value != rhs)
        return value

    def _unary(self) -> bool:
        if self._peek() == "!":
            self._take()
            return not self._unary()
        return self._primary()

    def _primary(self) -> bool:
        kind, value = self._take()
        if kind == "ident":
            return self.lookup(value)
        if value == "(":
            inner = self._or()
            if self._take()[1] != ")":
                raise _ConditionSyntaxError("missing ')'")
            return inner
        raise _ConditionSyntaxError(f"unexpected token {value!r}")


def evaluate_condition(
    condition: str,
    symbols: Mapping[str, bool],
    undefined_symbols_false: bool = False,
) -> bool:
    """Evaluate a directive condition such as ``!DOTNETCORE && (A || B)``.

    Raises:
        ConfigurationError: If a symbol is not in ``symbols`` and
            ``undefined_symbols_false`` is not set.
        ValueError: If the condition is malformed.
    """
    def lookup(name: str) -> bool:
        if name in CONDITION_LITERALS:
            return CONDITION_LITERALS[name]
        if name in symbols:
            return bool(symbols[name])
        if undefined_symbols_false:
            return False
        raise ConfigurationError(f"Unknown condition symbol '{name}'")

    return _ConditionParser(_tokenize(condition), lookup).parse()


def referenced_symbols(segments: List[Segment]) -> Set[str]:
    """Collect the condition symbols used by the ``#if``/``#elif`` segments of a file.

    Only scanned directive segments count, so a ``#if`` quoted inside a
    documentation block never references a symbol. Malformed conditions are
    ignored here; they surface as a structural error when the file itself is
    processed.
    """
    found: Set[str] = set()
    for segment in segments:
        if segment.kind is not SegmentKind.DIRECTIVE:
            continue
        match = DIRECTIVE_RE.match(segment.text)
        if match.group("name") not in (DIRECTIVE_BEGIN, DIRECTIVE_ELIF):
            continue
        try:
            tokens = _tokenize(match.group("condition"))
        except _ConditionSyntaxError:
            continue
        found.update(
            value for kind, value in tokens
            if kind == "ident" and value not in CONDITION_LITERALS
        )
    return found


def resolve_conditionals(
    segments: List[Segment],
    symbols: Mapping[str, bool],
    undefined_symbols_false: bool = False,
) -> List[Segment]:
    """Drop directive segments and segments in inactive branches.

    Args:
        segments: Scanner output in document order.
        symbols: Condition-symbol table of the documentation build.
        undefined_symbols_false: Treat unknown symbols as false instead of
            raising ConfigurationError.

    Returns:
        The retained segments, order preserved.

    Raises:
        StructuralParseError: For unbalanced or malformed directives.
        ConfigurationError: For an unknown symbol.
    """
    stack: List[ConditionalBranch] = []
    kept: List[Segment] = []

    for segment in segments:
        if segment.kind is not SegmentKind.DIRECTIVE:
            if not stack or stack[-1].kept:
                kept.append(segment)
            continue

        match = DIRECTIVE_RE.match(segment.text)
        name, condition = match.group("name"), match.group("condition")

        def evaluate() -> bool:
            try:
                return evaluate_condition(condition, symbols, undefined_symbols_false)
            except _ConditionSyntaxError as exc:
                raise StructuralParseError(
                    f"malformed #{name} condition: {exc}", line=segment.line
                ) from exc

        if name == DIRECTIVE_BEGIN:
            parent_kept = not stack or stack[-1].kept
            value = parent_kept and evaluate()
            stack.append(ConditionalBranch(
                kept=value,
                parent_kept=parent_kept,
                taken=value,
                depth=len(stack) + 1,
                line=segment.line,
            ))
            continue

        if not stack:
            raise StructuralParseError(f"#{name} without matching #if", line=segment.line)
        frame = stack[-1]

        if name == DIRECTIVE_END:
            stack.pop()
        elif frame.seen_else:
            raise StructuralParseError(f"#{name} after #else", line=segment.line)
        elif name == DIRECTIVE_ELSE:
            frame.seen_else = True
            frame.kept = frame.parent_kept and not frame.taken
            frame.taken = frame.taken or frame.kept
        elif name == DIRECTIVE_ELIF:
            frame.kept = frame.parent_kept and not frame.taken and evaluate()
            frame.taken = frame.taken or frame.kept

    if stack:
        raise StructuralParseError(
            f"#if at line {stack[-1].line} is never closed", line=stack[-1].line
        )

    logger.debug("Conditional resolution kept %d of %d segments", len(kept), len(segments))
    return kept
