"""Heuristic read/write analysis of opaque rule logic.

Extracts the identifiers a logic string reads and the identifiers it assigns.
This is simple token matching over a JavaScript-like expression language,
not a parser: there is no grammar and no scoping, and the text is never
executed. Member-access assignments (``obj.prop = 1``) are not special-cased;
the token immediately before ``=`` is reported as the output.
"""

import re
from typing import Iterable, Tuple

from pydantic import BaseModel, ConfigDict

RESERVED_WORDS = frozenset({
    "true", "false", "null", "undefined",
    "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
    "return", "function", "const", "let", "var", "new", "this",
    "typeof", "instanceof", "in", "of",
    "try", "catch", "finally", "throw",
    "class", "extends", "super", "static",
    "import", "export", "default", "from", "as",
    "async", "await", "yield",
    "delete", "void", "debugger", "with",
})

BUILTINS = frozenset({
    "Math", "Number", "String", "Boolean", "Array", "Object",
    "parseInt", "parseFloat", "isNaN", "isFinite",
    "console", "JSON", "Date",
})

_STRING_LITERALS = (
    (re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL), '""'),
    (re.compile(r"'(?:[^'\\]|\\.)*'", re.DOTALL), "''"),
    (re.compile(r"`(?:[^`\\]|\\.)*`", re.DOTALL), "``"),
)
_IDENTIFIER = re.compile(r"\b([a-zA-Z_][a-zA-Z0-9_]*)\b", re.ASCII)
# identifier followed by a lone "=" (not ==, ===, !=, !==)
_ASSIGNMENT = re.compile(r"\b([a-zA-Z_][a-zA-Z0-9_]*)\s*(?<!=)=(?!=)", re.ASCII)


class LogicAnalysis(BaseModel):
    """Identifiers read and written by a logic string, in first-appearance order."""
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]

    model_config = ConfigDict(frozen=True, extra="forbid")


def strip_string_literals(logic: str) -> str:
    """Blank out the contents of quoted literals to avoid false positives."""
    for pattern, replacement in _STRING_LITERALS:
        logic = pattern.sub(replacement, logic)
    return logic


def _unique(tokens: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(tokens))


def _is_reserved(token: str) -> bool:
    return token in RESERVED_WORDS or token in BUILTINS


def extract_outputs(logic: str) -> Tuple[str, ...]:
    """Identifiers on the left-hand side of simple assignments."""
    text = strip_string_literals(logic)
    return _unique(
        m.group(1) for m in _ASSIGNMENT.finditer(text) if not _is_reserved(m.group(1))
    )


def extract_identifiers(logic: str) -> Tuple[str, ...]:
    """All non-reserved identifier tokens."""
    text = strip_string_literals(logic)
    return _unique(
        m.group(1) for m in _IDENTIFIER.finditer(text) if not _is_reserved(m.group(1))
    )


def analyze_logic(logic: str) -> LogicAnalysis:
    """Infer inputs and outputs of a logic string.

    >>> analyze_logic("x = a + b;")
    LogicAnalysis(inputs=('a', 'b'), outputs=('x',))
    """
    outputs = extract_outputs(logic)
    written = set(outputs)
    inputs = tuple(i for i in extract_identifiers(logic) if i not in written)
    return LogicAnalysis(inputs=inputs, outputs=outputs)
