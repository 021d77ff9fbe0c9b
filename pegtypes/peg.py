"""
peg.py — peggy grammar front-end
================================

Parses peggy grammar source text into a ``pegtypes.grammar.Grammar``.

Usage::

    from pegtypes.peg import parse_grammar

    grammar = parse_grammar('''
        start = "a" / "b"
    ''')

Supported syntax: ``//`` and ``/* */`` comments, ``{{ }}`` and ``{ }``
initializers, ``name "display name" = expression``, optional ``;``
terminators, choice ``/``, action code blocks, labels ``name:`` and ``@``,
the ``$ & !`` prefixes, semantic predicates ``&{ }`` and ``!{ }``, the
``? * +`` suffixes, ``|min..max|`` repetition ranges with an optional
``, delimiter``, string literals with JavaScript escapes and the ``i``
flag, character classes, ``.``, rule references and parentheses.

Code blocks are matched by balancing braces only; a brace inside a string
or comment within a code block must itself be balanced.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Optional, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar as PegGrammar
from parsimonious.nodes import NodeVisitor

from pegtypes.errors import GrammarSyntaxError, PegTypesError, UndefinedRuleError
from pegtypes.grammar import (
    Action,
    Alternation,
    AnyCharacter,
    Capture,
    CharacterClass,
    Grammar,
    LiteralSet,
    OptionalMatch,
    Predicate,
    Repetition,
    Rule,
    RuleRef,
    Sequence,
    Text,
)

logger = logging.getLogger(__name__)

__all__ = ["PEG_GRAMMAR", "GrammarBuilder", "parse_grammar", "unescape"]


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — PEGGY GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

PEG_GRAMMAR = PegGrammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Top-Level Structure
    # ─────────────────────────────────────────────────────────────

    grammar             = _ initializer* rule*
    initializer         = code_block _ (";" _)?

    rule                = identifier _ display_name? "=" _ choice (";" _)?
    display_name        = string_literal _

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    choice              = action_expr ("/" _ action_expr)*
    action_expr         = sequence action?
    action              = code_block _
    sequence            = labeled+
    labeled             = pluck? label? prefixed
    pluck               = "@" _
    label               = identifier _ ":" _
    prefixed            = semantic_predicate / operator_expr
    semantic_predicate  = ~r"[&!]" _ code_block _
    operator_expr       = prefix? suffixed
    prefix              = ~r"[$&!]" _
    suffixed            = primary suffix?
    suffix              = operator_suffix / repeat_range
    operator_suffix     = ~r"[?*+]" _
    repeat_range        = "|" _ range_bounds ("," _ choice)? "|" _
    range_bounds        = range_bound? _ (".." _ range_bound? _)?
    range_bound         = ~r"[0-9]+" / identifier / code_block
    primary             = literal / char_class / any_char / rule_ref / group

    literal             = string_literal ignore_case? _
    ignore_case         = ~r"i(?![A-Za-z0-9_])"
    char_class          = ~r"\[(?:[^\]\\]|\\.)*\](?:i(?![A-Za-z0-9_]))?"s _
    any_char            = "." _
    rule_ref            = identifier _ !rule_head
    rule_head           = display_name? "="
    group               = "(" _ choice ")" _

    # ─────────────────────────────────────────────────────────────
    # Code Blocks
    # ─────────────────────────────────────────────────────────────

    code_block          = "{" code_body "}"
    code_body           = (~r"[^{}]+" / code_block)*

    # ─────────────────────────────────────────────────────────────
    # Tokens & Whitespace
    # ─────────────────────────────────────────────────────────────

    string_literal      = ~r'"(?:[^"\\]|\\.)*"'s / ~r"'(?:[^'\\]|\\.)*'"s
    identifier          = ~r"[A-Za-z_][A-Za-z0-9_]*"
    _                   = ~r"(?:\s|//[^\n]*|/\*[\s\S]*?\*/)*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — STRING LITERAL ESCAPES
# ═══════════════════════════════════════════════════════════════════

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "f": "\f",
    "b": "\b",
    "0": "\0",
}

_ESCAPE = re.compile(
    r"\\(x[0-9A-Fa-f]{2}|u[0-9A-Fa-f]{4}|u\{[0-9A-Fa-f]+\}|\r\n|[\s\S])"
)


def unescape(body: str) -> str:
    """Decode JavaScript string escapes in a literal's body (no quotes)."""

    def replace(match: "re.Match[str]") -> str:
        escape = match.group(1)
        if len(escape) > 1 and escape[0] in "xu":
            return chr(int(escape[1:].strip("{}"), 16))
        if escape in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
            return ""
        return _SIMPLE_ESCAPES.get(escape, escape)

    return _ESCAPE.sub(replace, body)


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PARSE TREE → RULE GRAPH
# ═══════════════════════════════════════════════════════════════════

def _optional(value: Any) -> Any:
    """Result of an ``x?`` subexpression, or None when it did not match."""
    if isinstance(value, list):
        return value[0] if value else None
    return None


def _many(value: Any) -> List[Any]:
    """Results of an ``x*`` subexpression."""
    return value if isinstance(value, list) else []


class GrammarBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into a ``Grammar``."""

    unwrapped_exceptions = (PegTypesError,)

    def __init__(self, allowed_start_rules: Optional[Iterable[str]] = None) -> None:
        self._allowed = None if allowed_start_rules is None else list(allowed_start_rules)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # ─────────────────────────────────────────────────────────────
    # Grammar & Rules
    # ─────────────────────────────────────────────────────────────

    def visit_grammar(self, node, visited_children):
        _, _, rules = visited_children
        parsed = _many(rules)
        names = [name for name, _, _ in parsed]

        starts = set()
        if self._allowed is not None:
            if "*" in self._allowed:
                starts = set(names)
            else:
                for name in self._allowed:
                    if name not in names:
                        raise UndefinedRuleError(name, "allowed start rules")
                starts = set(self._allowed)

        return Grammar([
            Rule(name=name, body=body, start=name in starts, display_name=display)
            for name, display, body in parsed
        ])

    def visit_initializer(self, node, visited_children):
        return None

    def visit_rule(self, node, visited_children):
        name, _, display, _, _, body, _ = visited_children
        return (name, _optional(display), body)

    def visit_display_name(self, node, visited_children):
        return visited_children[0]

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    def visit_choice(self, node, visited_children):
        first, rest = visited_children
        alternatives = [first] + [item[2] for item in _many(rest)]
        if len(alternatives) == 1:
            return first

        if all(isinstance(alt, LiteralSet) and not alt.ignore_case for alt in alternatives):
            values: List[str] = []
            for alt in alternatives:
                values.extend(value for value in alt.values if value not in values)
            return LiteralSet(tuple(values))
        return Alternation(tuple(alternatives))

    def visit_action_expr(self, node, visited_children):
        expression, action = visited_children
        code = _optional(action)
        if code is None:
            return expression
        return Action(expression, code)

    def visit_action(self, node, visited_children):
        return visited_children[0]

    def visit_sequence(self, node, visited_children):
        if len(visited_children) == 1:
            return visited_children[0]
        return Sequence(tuple(visited_children))

    def visit_labeled(self, node, visited_children):
        pluck, label, expression = visited_children
        pluck, label = _optional(pluck), _optional(label)
        if pluck is None and label is None:
            return expression
        return Capture(expression, label=label, pluck=bool(pluck))

    def visit_pluck(self, node, visited_children):
        return True

    def visit_label(self, node, visited_children):
        return visited_children[0]

    def visit_prefixed(self, node, visited_children):
        return visited_children[0]

    def visit_semantic_predicate(self, node, visited_children):
        _, _, code, _ = visited_children
        return Predicate(None, negated=node.text.startswith("!"), code=code)

    def visit_operator_expr(self, node, visited_children):
        prefix, expression = visited_children
        prefix = _optional(prefix)
        if prefix == "$":
            return Text(expression)
        if prefix in ("&", "!"):
            return Predicate(expression, negated=prefix == "!")
        return expression

    def visit_prefix(self, node, visited_children):
        return node.text[0]

    def visit_suffixed(self, node, visited_children):
        expression, suffix = visited_children
        suffix = _optional(suffix)
        if suffix == "?":
            return OptionalMatch(expression)
        if suffix in ("*", "+"):
            return Repetition(expression, at_least_one=suffix == "+")
        if isinstance(suffix, int):
            return Repetition(expression, at_least_one=suffix > 0)
        return expression

    def visit_suffix(self, node, visited_children):
        return visited_children[0]

    def visit_operator_suffix(self, node, visited_children):
        return node.text[0]

    def visit_repeat_range(self, node, visited_children):
        # Minimum count only; delimiter matches are dropped from the result.
        return visited_children[2]

    def visit_range_bounds(self, node, visited_children):
        minimum = _optional(visited_children[0])
        return minimum if isinstance(minimum, int) else 0

    def visit_range_bound(self, node, visited_children):
        if node.text.isdigit():
            return int(node.text)
        return None

    def visit_primary(self, node, visited_children):
        return visited_children[0]

    def visit_literal(self, node, visited_children):
        value, ignore_case, _ = visited_children
        return LiteralSet((value,), ignore_case=bool(_optional(ignore_case)))

    def visit_ignore_case(self, node, visited_children):
        return True

    def visit_char_class(self, node, visited_children):
        return CharacterClass(visited_children[0].text)

    def visit_any_char(self, node, visited_children):
        return AnyCharacter()

    def visit_rule_ref(self, node, visited_children):
        return RuleRef(visited_children[0])

    def visit_group(self, node, visited_children):
        return visited_children[2]

    # ─────────────────────────────────────────────────────────────
    # Tokens
    # ─────────────────────────────────────────────────────────────

    def visit_code_block(self, node, visited_children):
        return node.text

    def visit_string_literal(self, node, visited_children):
        return unescape(node.text[1:-1])

    def visit_identifier(self, node, visited_children):
        return node.text


def parse_grammar(
    source: str,
    allowed_start_rules: Optional[Union[str, Iterable[str]]] = None,
) -> Grammar:
    """Parse peggy grammar source into a rule graph.

    ``allowed_start_rules`` names the exported rules; ``None`` selects the
    first rule and ``"*"`` selects every rule.
    """
    if isinstance(allowed_start_rules, str):
        allowed_start_rules = [allowed_start_rules]
    try:
        tree = PEG_GRAMMAR.parse(source)
    except ParseError as exc:
        snippet = exc.text[exc.pos:exc.pos + 20]
        raise GrammarSyntaxError(
            f"unexpected input {snippet!r}", line=exc.line(), column=exc.column()
        ) from exc

    grammar = GrammarBuilder(allowed_start_rules).visit(tree)
    logger.debug("Parsed grammar with %d rules", len(grammar))
    return grammar
