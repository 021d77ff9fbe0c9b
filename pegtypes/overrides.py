"""
pegtypes/overrides.py
=====================

Merges the caller's ``return_types`` mapping with the rule graph.

Rules named in the mapping are *explicit*: their type text is taken
verbatim, never parsed, renamed or checked against the rule's shape.
Every other rule is *pending* and goes to the inferencer. Mapping keys
that name no rule are kept aside in ``unmatched`` and otherwise ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from pegtypes.grammar import Grammar
from pegtypes.typeexpr import TypeExpr

logger = logging.getLogger(__name__)

__all__ = ["OverrideResolution", "ResolvedType", "resolve_overrides"]


@dataclass(frozen=True)
class ResolvedType:
    """Final type of one rule."""
    rule: str
    expression: TypeExpr
    exported: bool = False
    explicit: bool = False


@dataclass
class OverrideResolution:
    explicit: Dict[str, str] = field(default_factory=dict)
    pending: List[str] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)

    def is_explicit(self, rule: str) -> bool:
        return rule in self.explicit


def resolve_overrides(
    grammar: Grammar,
    return_types: Optional[Mapping[str, str]] = None,
) -> OverrideResolution:
    """Partition the grammar's rules into explicit and pending."""
    return_types = return_types or {}
    resolution = OverrideResolution()

    for name in grammar.names:
        if name in return_types:
            resolution.explicit[name] = return_types[name]
        else:
            resolution.pending.append(name)

    resolution.unmatched = [key for key in return_types if key not in grammar]
    if resolution.unmatched:
        logger.debug(
            "Ignoring return types for unknown rules: %s",
            ", ".join(resolution.unmatched),
        )
    logger.debug(
        "%d explicit, %d pending rule types",
        len(resolution.explicit),
        len(resolution.pending),
    )
    return resolution
