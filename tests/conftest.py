# tests/conftest.py
"""Shared grammar sources and fixtures."""

import pytest

from pegtypes.grammar import (
    Alternation,
    Grammar,
    LiteralSet,
    Rule,
    RuleRef,
)


ARITHMETICS_PEG = r'''
// Simple Arithmetics Grammar
// ==========================
//
// Accepts expressions like "2 * (3 + 4)" and computes their value.

Expression
  = head:Term tail:(_ @("+" / "-") _ @Term)* {
      return tail.reduce(function(result, element) {
        if (element[0] === "+") { return result + element[1]; }
        if (element[0] === "-") { return result - element[1]; }
      }, head);
    }

Term
  = head:Factor tail:(_ @("*" / "/") _ @Factor)* {
      return tail.reduce(function(result, element) {
        if (element[0] === "*") { return result * element[1]; }
        if (element[0] === "/") { return result / element[1]; }
      }, head);
    }

Factor
  = "(" _ @Expression _ ")"
  / Integer

Integer "integer"
  = _ [0-9]+ { return parseInt(text(), 10); }

_ "whitespace"
  = [ \t\n\r]*
'''

MINIMAL_PEG = r'''
START = "a" / "b"
'''

SNAKE_CASE_PEG = r'''
start = $"a"+ / other_rule
other_rule = $[b-z]+
'''

WHITESPACE_PEG = r'''
WhiteSpace "whitespace"
  = "\t"
  / "\v"
  / "\f"
  / " "
  / "\u00A0"
  / "\uFEFF"
  / Zs

LineTerminator
  = [\n\r\u2028\u2029]

LineTerminatorSequence "end of line"
  = "\n"
  / "\r\n"
  / "\r"
  / "\u2028"
  / "\u2029"

// Separator, Space
Zs = [\u0020\u00A0\u1680\u2000-\u200A\u202F\u205F\u3000]
'''


@pytest.fixture
def arithmetic_graph():
    """Expression → Term → Factor → (Expression | Integer), built directly."""
    return Grammar([
        Rule("Expression", Alternation((RuleRef("Term"),)), start=True),
        Rule("Term", Alternation((RuleRef("Factor"),))),
        Rule("Factor", Alternation((RuleRef("Expression"), RuleRef("Integer")))),
        Rule("Integer", LiteralSet(("0", "1", "2"))),
    ])


@pytest.fixture
def minimal_graph():
    return Grammar([Rule("START", LiteralSet(("a", "b")), start=True)])
