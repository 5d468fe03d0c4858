"""
Pattern library for the safety analyzer.

Each rule is an independent predicate over the raw fragment text. Rules never
depend on each other's outcome and are evaluated in declaration order.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

# Identifier characters for both JavaScript-style and Python fragments.
_IDENT = r"[\w$]"


class Severity(str, Enum):
    ISSUE = "issue"
    WARNING = "warning"


@dataclass(frozen=True)
class PatternRule:
    id: str
    matcher: Callable[[str], bool]
    severity: Severity
    message: str


def _regex(pattern: str, flags: int = 0) -> Callable[[str], bool]:
    compiled = re.compile(pattern, flags)

    def _match(text: str) -> bool:
        return compiled.search(text) is not None

    return _match


def _brace_body(text: str, start: int) -> str:
    """Return the loop body that begins at ``start`` (just after the header)."""
    pos = start
    while pos < len(text) and text[pos] in " \t\r\n":
        pos += 1
    if pos >= len(text):
        return ""
    if text[pos] != "{":
        end = len(text)
        for terminator in (";", "\n"):
            found = text.find(terminator, pos)
            if found != -1:
                end = min(end, found)
        return text[pos:end]

    depth = 0
    for index in range(pos, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[pos + 1 : index]
    # Unbalanced: the rest of the text is the body.
    return text[pos + 1 :]


def _indented_body(text: str, header: re.Match[str]) -> str:
    """Return the body of a Python ``while True:`` loop."""
    line_start = text.rfind("\n", 0, header.start()) + 1
    header_indent = len(text[line_start : header.start()])

    line_end = text.find("\n", header.end())
    if line_end == -1:
        return text[header.end() :]
    body = [text[header.end() : line_end]]

    for line in text[line_end + 1 :].splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(line) - len(line.lstrip())
        if indent <= header_indent:
            break
        body.append(line)
    return "\n".join(body)


_BREAK = re.compile(r"(?<![\w$])break(?![\w$])")


def _loop_without_break(
    header: str, body_of: Callable[[str, re.Match[str]], str]
) -> Callable[[str], bool]:
    compiled = re.compile(header)

    def _match(text: str) -> bool:
        for found in compiled.finditer(text):
            if not _BREAK.search(body_of(text, found)):
                return True
        return False

    return _match


def _after_header(text: str, found: re.Match[str]) -> str:
    return _brace_body(text, found.end())


PATTERN_LIBRARY: tuple[PatternRule, ...] = (
    PatternRule(
        id="eval",
        matcher=_regex(rf"(?<!{_IDENT})eval\s*\("),
        severity=Severity.ISSUE,
        message="Use of eval() detected - this is a security risk",
    ),
    PatternRule(
        id="function-constructor",
        matcher=_regex(rf"(?<!{_IDENT})Function\s*\("),
        severity=Severity.ISSUE,
        message="Use of Function constructor detected - this is a security risk",
    ),
    PatternRule(
        id="inner-html",
        matcher=_regex(rf"\.innerHTML(?!{_IDENT})\s*\+?=(?!=)"),
        severity=Severity.WARNING,
        message="innerHTML usage detected - be careful with user input",
    ),
    PatternRule(
        id="document-write",
        matcher=_regex(rf"(?<!{_IDENT})document\s*\.\s*write(?:ln)?\s*\("),
        severity=Severity.WARNING,
        message="document.write() detected - this can cause issues",
    ),
    PatternRule(
        id="window-location",
        matcher=_regex(
            rf"(?<!{_IDENT})window\s*\.\s*location"
            rf"(?:\s*\.\s*(?:href(?!{_IDENT})\s*\+?=(?!=)|(?:assign|replace)\s*\()"
            r"|\s*=(?!=))"
        ),
        severity=Severity.WARNING,
        message="window.location modification detected",
    ),
    PatternRule(
        id="proto",
        matcher=_regex(rf"(?<!{_IDENT})__proto__(?!{_IDENT})"),
        severity=Severity.ISSUE,
        message="__proto__ usage detected - this is a security risk",
    ),
    PatternRule(
        id="constructor-access",
        matcher=_regex(rf"(?<!{_IDENT})constructor\s*\["),
        severity=Severity.WARNING,
        message="Constructor bracket access detected - potential prototype pollution",
    ),
    PatternRule(
        id="while-true",
        matcher=_loop_without_break(
            rf"(?<!{_IDENT})while\s*\(\s*true\s*\)", _after_header
        ),
        severity=Severity.WARNING,
        message="Potential infinite loop detected (while(true) without break)",
    ),
    PatternRule(
        id="for-ever",
        matcher=_loop_without_break(
            rf"(?<!{_IDENT})for\s*\(\s*;\s*;\s*\)", _after_header
        ),
        severity=Severity.WARNING,
        message="Potential infinite loop detected (for(;;) without break)",
    ),
    PatternRule(
        id="large-array",
        matcher=_regex(rf"(?<!{_IDENT})(?:[A-Z][\w$]*)?Array\s*\(\s*\d{{6,}}\s*\)"),
        severity=Severity.WARNING,
        message="Large array allocation detected - may cause memory issues",
    ),
    PatternRule(
        id="exec",
        matcher=_regex(rf"(?<![\w$.])exec\s*\("),
        severity=Severity.ISSUE,
        message="Use of exec() detected - this is a security risk",
    ),
    PatternRule(
        id="dynamic-import",
        matcher=_regex(rf"(?<!{_IDENT})__import__(?!{_IDENT})"),
        severity=Severity.ISSUE,
        message="Use of __import__() detected - this is a security risk",
    ),
    PatternRule(
        id="dunder-escape",
        matcher=_regex(
            rf"(?<!{_IDENT})__(?:subclasses|globals|builtins|bases|mro|code)__(?!{_IDENT})"
        ),
        severity=Severity.ISSUE,
        message="Interpreter internals access detected - this is a security risk",
    ),
    PatternRule(
        id="while-true-py",
        matcher=_loop_without_break(
            rf"(?<!{_IDENT})while(?:\s+|\s*\()\s*True\s*\)?\s*:", _indented_body
        ),
        severity=Severity.WARNING,
        message="Potential infinite loop detected (while True without break)",
    ),
)
