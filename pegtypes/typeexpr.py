"""
pegtypes/typeexpr.py
====================

TypeScript type expressions produced by inference.

Nodes are immutable and hashable so unions can be deduplicated by value.
``TypeRef`` names a rule, not a declaration: the identifier is supplied at
render time by a naming callback, which keeps inference independent of the
casing policy.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

__all__ = [
    "TypeExpr",
    "Keyword",
    "LiteralType",
    "TypeRef",
    "RawType",
    "ArrayType",
    "UnionType",
    "union",
    "STRING",
    "NULL",
    "UNDEFINED",
    "NEVER",
]

NameOf = Callable[[str], str]

# Raw text that would bind looser than a trailing "[]".
_LOOSE_RAW = re.compile(r"[|&]|=>|\?")


@dataclass(frozen=True)
class TypeExpr:
    """Base class for type expressions."""

    def render(self, name_of: NameOf) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Keyword(TypeExpr):
    name: str

    def render(self, name_of: NameOf) -> str:
        return self.name


@dataclass(frozen=True)
class LiteralType(TypeExpr):
    """A string literal type, quoted JSON-style with non-ASCII escaped."""
    value: str

    def render(self, name_of: NameOf) -> str:
        return json.dumps(self.value)


@dataclass(frozen=True)
class TypeRef(TypeExpr):
    """Opaque reference to a rule's declaration."""
    rule: str

    def render(self, name_of: NameOf) -> str:
        return name_of(self.rule)


@dataclass(frozen=True)
class RawType(TypeExpr):
    """Verbatim type text (explicit overrides, the fallback type)."""
    text: str

    def render(self, name_of: NameOf) -> str:
        return self.text


@dataclass(frozen=True)
class ArrayType(TypeExpr):
    element: TypeExpr

    def render(self, name_of: NameOf) -> str:
        inner = self.element.render(name_of)
        if isinstance(self.element, UnionType) or (
            isinstance(self.element, RawType) and _LOOSE_RAW.search(inner)
        ):
            inner = f"({inner})"
        return f"{inner}[]"


@dataclass(frozen=True)
class UnionType(TypeExpr):
    members: Tuple[TypeExpr, ...]

    def render(self, name_of: NameOf) -> str:
        return " | ".join(self.render_members(name_of))

    def render_members(self, name_of: NameOf) -> List[str]:
        return [member.render(name_of) for member in self.members]


STRING = Keyword("string")
NULL = Keyword("null")
UNDEFINED = Keyword("undefined")
NEVER = Keyword("never")


def union(*members: TypeExpr) -> TypeExpr:
    """Build a flattened, order-preserving, duplicate-free union.

    A single distinct member is returned as is; no members gives ``never``.
    """
    flat: List[TypeExpr] = []
    for member in members:
        parts = member.members if isinstance(member, UnionType) else (member,)
        for part in parts:
            if part not in flat:
                flat.append(part)
    if not flat:
        return NEVER
    if len(flat) == 1:
        return flat[0]
    return UnionType(tuple(flat))
