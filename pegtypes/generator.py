"""
pegtypes/generator.py
=====================

The declaration pipeline:

1. **Reference check** - dangling references are the only fatal input
2. **Override resolution** - explicit vs pending rules
3. **Inference** - a type for every pending rule
4. **Naming** - rule names to declaration identifiers
5. **Rendering** - header, banner and ordered declarations

Each call builds everything from scratch; nothing is cached between calls.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from pegtypes.config import GeneratorConfig
from pegtypes.grammar import Grammar
from pegtypes.inference import TypeInferencer
from pegtypes.naming import DeclarationNamer
from pegtypes.overrides import ResolvedType, resolve_overrides
from pegtypes.renderer import Declaration, render_declarations

logger = logging.getLogger(__name__)

__all__ = ["generate_types", "resolve_types"]


def resolve_types(
    grammar: Grammar,
    return_types: Optional[Mapping[str, str]] = None,
    config: Optional[GeneratorConfig] = None,
) -> List[ResolvedType]:
    """Resolve one type per rule, in declaration order.

    Raises ``UndefinedRuleError`` if a rule references a missing rule.
    """
    config = config or GeneratorConfig()
    grammar.check_references()

    resolution = resolve_overrides(grammar, return_types)
    inferencer = TypeInferencer(grammar, resolution, config.fallback_type)
    types = inferencer.infer_all()

    exported = set(grammar.start_rules)
    return [
        ResolvedType(
            rule=name,
            expression=types[name],
            exported=name in exported,
            explicit=resolution.is_explicit(name),
        )
        for name in grammar.names
    ]


def generate_types(
    grammar: Grammar,
    return_types: Optional[Mapping[str, str]] = None,
    config: Optional[GeneratorConfig] = None,
) -> str:
    """Render the type declarations for every rule of ``grammar``."""
    config = config or GeneratorConfig()
    for warning in config.validate():
        logger.warning("%s", warning)

    resolved = resolve_types(grammar, return_types, config)
    namer = DeclarationNamer(grammar.names, camel_case=not config.do_not_camel_case_types)
    declarations = [
        Declaration(namer[item.rule], item.expression, item.exported)
        for item in resolved
    ]
    logger.debug(
        "Rendering %d declarations (%d exported)",
        len(declarations),
        sum(1 for item in resolved if item.exported),
    )
    return render_declarations(declarations, namer, header=config.custom_header)
