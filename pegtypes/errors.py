# pegtypes/errors.py
"""
pegtypes Error Types

Exceptions raised by the grammar model and the grammar source front-end.

Hierarchy:
──────────
┌──────────────────────────────────────────────────────────────────────┐
│  PegTypesError (base)                                                │
│  ├── GrammarError          - Malformed rule graph                    │
│  │   ├── DuplicateRuleError  - Two rules share a name                │
│  │   └── UndefinedRuleError  - Reference to a rule that is missing   │
│  └── GrammarSyntaxError    - Grammar source text failed to parse     │
└──────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Each error carries a code of the form PEGT-NNNN:
  - 1000-1999: Syntax errors (grammar source text)
  - 2000-2999: Rule graph errors

Type inference itself never raises: unknown override keys, malformed
override text and cyclic or unreachable rules all produce output.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """Structured error codes (``PEGT-NNNN``)."""

    SYNTAX_ERROR = 1000
    DUPLICATE_RULE = 2000
    UNDEFINED_RULE = 2001

    def __str__(self) -> str:
        return f"PEGT-{self.value:04d}"


class PegTypesError(Exception):
    """Base exception for all pegtypes errors."""

    code: ErrorCode = ErrorCode.SYNTAX_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class GrammarError(PegTypesError):
    """The rule graph handed to the pipeline is malformed."""


class DuplicateRuleError(GrammarError):
    code = ErrorCode.DUPLICATE_RULE

    def __init__(self, rule: str) -> None:
        super().__init__(f"Rule {rule!r} is defined more than once")
        self.rule = rule


class UndefinedRuleError(GrammarError):
    """A rule body references a rule that does not exist."""

    code = ErrorCode.UNDEFINED_RULE

    def __init__(self, rule: str, referenced_from: str) -> None:
        super().__init__(
            f"Rule {rule!r} referenced from {referenced_from!r} is not defined"
        )
        self.rule = rule
        self.referenced_from = referenced_from


class GrammarSyntaxError(PegTypesError):
    """Grammar source text could not be parsed."""

    code = ErrorCode.SYNTAX_ERROR

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        location = f"line {line}, column {column}: " if line else ""
        super().__init__(f"{location}{message}")
        self.line = line
        self.column = column
