"""
pegtypes/inference.py
=====================

Structural type inference for grammar rules.

Every rule gets exactly one type:

* explicit rules take their override text verbatim (``RawType``);
* a rule whose body is a bare reference to another rule takes that rule's
  type, following reference chains until a rule with structure, an
  explicit rule or a cycle is reached;
* any other rule is typed from the shape of its body. References inside
  a body stay opaque (``TypeRef``) and render as the referenced rule's
  declaration name, so recursive grammars never need expanding.

Expressions whose value depends on action code, and sequences without a
single plucked element, get the configured fallback type.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from pegtypes import grammar as G
from pegtypes.config import DEFAULT_FALLBACK_TYPE
from pegtypes.overrides import OverrideResolution
from pegtypes.typeexpr import (
    NULL,
    STRING,
    UNDEFINED,
    ArrayType,
    LiteralType,
    RawType,
    TypeExpr,
    TypeRef,
    union,
)

logger = logging.getLogger(__name__)

__all__ = ["TypeInferencer", "pure_reference"]


def pure_reference(body: G.Expression) -> Optional[str]:
    """Name of the rule ``body`` is exactly a reference to, if any."""
    while isinstance(body, G.Alternation) and len(body.alternatives) == 1:
        body = body.alternatives[0]
    if isinstance(body, G.RuleRef):
        return body.rule
    return None


class TypeInferencer:
    """Computes a ``TypeExpr`` for every rule of a grammar.

    Parameters
    ----------
    grammar:
        The rule graph. References are assumed to be valid.
    resolution:
        Explicit/pending partition from ``resolve_overrides``.
    fallback_type:
        Type text used where structure gives no signal.
    """

    def __init__(
        self,
        grammar: G.Grammar,
        resolution: OverrideResolution,
        fallback_type: str = DEFAULT_FALLBACK_TYPE,
    ) -> None:
        self._grammar = grammar
        self._resolution = resolution
        self._fallback = RawType(fallback_type)
        self._resolved: Dict[str, TypeExpr] = {}
        self._cyclic: Set[str] = set()

    def infer_all(self) -> Dict[str, TypeExpr]:
        """Types of all rules, keyed by rule name in declaration order."""
        return {name: self.resolve(name) for name in self._grammar.names}

    def resolve(self, name: str) -> TypeExpr:
        """Type of rule ``name``, memoised.

        Walks the chain of pure references starting at ``name`` without
        recursion; every rule on the chain receives the type found at its
        end. Rules on a reference cycle are given an opaque reference to
        their direct target; rules leading into a cycle get a reference to
        the cycle member they reach.
        """
        if name in self._resolved:
            return self._resolved[name]

        chain: List[str] = []
        position: Dict[str, int] = {}
        current = name
        while True:
            if current in self._cyclic:
                result = TypeRef(current)
                break
            if current in self._resolved:
                result = self._resolved[current]
                break
            if self._resolution.is_explicit(current):
                result = RawType(self._resolution.explicit[current])
                self._resolved[current] = result
                break
            if current in position:
                cycle = chain[position[current]:]
                del chain[position[current]:]
                logger.debug("Reference cycle: %s", " -> ".join(cycle + [current]))
                for member in cycle:
                    self._resolved[member] = TypeRef(self._target(member))
                self._cyclic.update(cycle)
                result = TypeRef(current)
                break
            target = self._target(current)
            if target is None:
                result = self.infer(self._grammar.rule(current).body)
                self._resolved[current] = result
                break
            position[current] = len(chain)
            chain.append(current)
            current = target

        for member in chain:
            self._resolved[member] = result
        return self._resolved[name]

    def _target(self, name: str) -> Optional[str]:
        return pure_reference(self._grammar.rule(name).body)

    # ─────────────────────────────────────────────────────────────
    # Structural inference
    # ─────────────────────────────────────────────────────────────

    def infer(self, expression: G.Expression) -> TypeExpr:
        """Type of the value ``expression`` produces when it matches."""
        method = getattr(self, f"visit_{type(expression).__name__}", self.generic_visit)
        return method(expression)

    def generic_visit(self, expression: G.Expression) -> TypeExpr:
        return self._fallback

    def visit_LiteralSet(self, node: G.LiteralSet) -> TypeExpr:
        if node.ignore_case:
            return STRING
        return union(*(LiteralType(value) for value in node.values))

    def visit_CharacterClass(self, node: G.CharacterClass) -> TypeExpr:
        return STRING

    def visit_AnyCharacter(self, node: G.AnyCharacter) -> TypeExpr:
        return STRING

    def visit_Text(self, node: G.Text) -> TypeExpr:
        return STRING

    def visit_RuleRef(self, node: G.RuleRef) -> TypeExpr:
        return TypeRef(node.rule)

    def visit_Alternation(self, node: G.Alternation) -> TypeExpr:
        return union(*(self.infer(alternative) for alternative in node.alternatives))

    def visit_Sequence(self, node: G.Sequence) -> TypeExpr:
        plucked = [
            element for element in node.elements
            if isinstance(element, G.Capture) and element.pluck
        ]
        if len(plucked) == 1:
            return self.infer(plucked[0])
        return self._fallback

    def visit_Repetition(self, node: G.Repetition) -> TypeExpr:
        return ArrayType(self.infer(node.expression))

    def visit_OptionalMatch(self, node: G.OptionalMatch) -> TypeExpr:
        return union(self.infer(node.expression), NULL)

    def visit_Capture(self, node: G.Capture) -> TypeExpr:
        return self.infer(node.expression)

    def visit_Predicate(self, node: G.Predicate) -> TypeExpr:
        return UNDEFINED

    def visit_Action(self, node: G.Action) -> TypeExpr:
        return self._fallback
