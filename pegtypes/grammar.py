"""
pegtypes/grammar.py
===================

Rule graph model.

A ``Grammar`` is a flat table of ``Rule`` objects indexed by name, kept in
declaration order. Rule bodies are trees of immutable ``Expression`` nodes;
rules point at each other only by name (``RuleRef``), so recursive and
mutually recursive grammars need no special handling here.

Expression kinds
----------------
LiteralSet      one of a fixed set of literal tokens ("a" / "b")
CharacterClass  [a-z]
AnyCharacter    .
RuleRef         reference to another rule
Alternation     ordered choice
Sequence        e1 e2 ...
Repetition      e* / e+
OptionalMatch   e?
Capture         label:e / @e
Text            $e
Predicate       &e / !e / &{ code } / !{ code }
Action          e { code }
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence as SequenceType, Tuple

from pegtypes.errors import DuplicateRuleError, UndefinedRuleError

logger = logging.getLogger(__name__)

__all__ = [
    "Expression",
    "LiteralSet",
    "CharacterClass",
    "AnyCharacter",
    "RuleRef",
    "Alternation",
    "Sequence",
    "Repetition",
    "OptionalMatch",
    "Capture",
    "Text",
    "Predicate",
    "Action",
    "Rule",
    "Grammar",
]


# ─────────────────────────────────────────────────────────────
# Expressions
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Expression:
    """Base class for rule body nodes."""

    def children(self) -> Tuple["Expression", ...]:
        return ()

    def walk(self) -> Iterator["Expression"]:
        """Pre-order traversal of this node and all its descendants."""
        stack: List[Expression] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children()))


@dataclass(frozen=True)
class LiteralSet(Expression):
    """Matches one of ``values``; a single literal is a one-element set."""
    values: Tuple[str, ...] = ()
    ignore_case: bool = False


@dataclass(frozen=True)
class CharacterClass(Expression):
    pattern: str = "[]"


@dataclass(frozen=True)
class AnyCharacter(Expression):
    pass


@dataclass(frozen=True)
class RuleRef(Expression):
    rule: str = ""


@dataclass(frozen=True)
class Alternation(Expression):
    alternatives: Tuple[Expression, ...] = ()

    def children(self) -> Tuple[Expression, ...]:
        return self.alternatives


@dataclass(frozen=True)
class Sequence(Expression):
    elements: Tuple[Expression, ...] = ()

    def children(self) -> Tuple[Expression, ...]:
        return self.elements


@dataclass(frozen=True)
class Repetition(Expression):
    expression: Expression = field(default_factory=AnyCharacter)
    at_least_one: bool = False

    def children(self) -> Tuple[Expression, ...]:
        return (self.expression,)


@dataclass(frozen=True)
class OptionalMatch(Expression):
    expression: Expression = field(default_factory=AnyCharacter)

    def children(self) -> Tuple[Expression, ...]:
        return (self.expression,)


@dataclass(frozen=True)
class Capture(Expression):
    """Labeled (``label:e``) or plucked (``@e``) sub-expression."""
    expression: Expression = field(default_factory=AnyCharacter)
    label: Optional[str] = None
    pluck: bool = False

    def children(self) -> Tuple[Expression, ...]:
        return (self.expression,)


@dataclass(frozen=True)
class Text(Expression):
    expression: Expression = field(default_factory=AnyCharacter)

    def children(self) -> Tuple[Expression, ...]:
        return (self.expression,)


@dataclass(frozen=True)
class Predicate(Expression):
    """Lookahead; ``expression`` is None for semantic predicates."""
    expression: Optional[Expression] = None
    negated: bool = False
    code: Optional[str] = None

    def children(self) -> Tuple[Expression, ...]:
        return (self.expression,) if self.expression is not None else ()


@dataclass(frozen=True)
class Action(Expression):
    """Expression followed by a code block; the code is kept as opaque text."""
    expression: Expression = field(default_factory=AnyCharacter)
    code: str = ""

    def children(self) -> Tuple[Expression, ...]:
        return (self.expression,)


# ─────────────────────────────────────────────────────────────
# Rules & Grammar
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rule:
    name: str
    body: Expression
    start: bool = False
    display_name: Optional[str] = None

    def references(self) -> List[str]:
        """Names of rules referenced from the body, in order of appearance."""
        return [node.rule for node in self.body.walk() if isinstance(node, RuleRef)]


class Grammar:
    """Ordered rule table.

    Parameters
    ----------
    rules:
        Rules in declaration order. Names must be unique.
    """

    def __init__(self, rules: SequenceType[Rule]) -> None:
        self._rules: List[Rule] = list(rules)
        self._index: Dict[str, Rule] = {}
        for rule in self._rules:
            if rule.name in self._index:
                raise DuplicateRuleError(rule.name)
            self._index[rule.name] = rule

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __repr__(self) -> str:
        return f"Grammar({[rule.name for rule in self._rules]!r})"

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    @property
    def names(self) -> List[str]:
        return [rule.name for rule in self._rules]

    def rule(self, name: str) -> Rule:
        return self._index[name]

    @property
    def start_rules(self) -> List[str]:
        """Rules flagged as start rules; the first rule when none is flagged."""
        flagged = [rule.name for rule in self._rules if rule.start]
        if flagged or not self._rules:
            return flagged
        return [self._rules[0].name]

    def references(self, name: str) -> List[str]:
        return self._index[name].references()

    def check_references(self) -> None:
        """Raise ``UndefinedRuleError`` on the first dangling reference."""
        for rule in self._rules:
            for target in rule.references():
                if target not in self._index:
                    raise UndefinedRuleError(target, rule.name)
        logger.debug("Checked references of %d rules", len(self._rules))
