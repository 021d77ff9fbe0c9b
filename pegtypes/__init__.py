"""pegtypes — TypeScript type declarations for PEG grammar rules.

Given a grammar's rule graph, pegtypes infers a type for every rule from
its structure, lets the caller pin any rule to an explicit type, and
renders the result as a block of ``type`` aliases ready to be spliced into
generated parser source.

Submodules
----------
grammar
    Rule graph model: ``Grammar``, ``Rule`` and the expression nodes.
overrides
    Explicit (caller-supplied) vs pending rule types.
inference
    ``TypeInferencer``: structural inference with cycle-safe reference
    resolution.
naming
    Rule name → declaration identifier (upper camel case by default).
renderer
    Declaration text, including wrapping of wide unions.
generator
    ``generate_types`` / ``resolve_types`` pipeline.
peg
    Parsimonious-based front-end for peggy grammar source text.

Usage
-----
Command-line::

    python -m pegtypes arithmetics.pegjs --return-types '{"Integer": "number"}'

Programmatic::

    from pegtypes import generate_types, parse_grammar

    grammar = parse_grammar(source)
    print(generate_types(grammar, {"Integer": "number"}))
"""

from __future__ import annotations

__version__: str = "0.1.0"

from pegtypes.config import GeneratorConfig
from pegtypes.errors import (
    DuplicateRuleError,
    GrammarError,
    GrammarSyntaxError,
    PegTypesError,
    UndefinedRuleError,
)
from pegtypes.generator import generate_types, resolve_types
from pegtypes.grammar import Grammar, Rule
from pegtypes.peg import parse_grammar

__all__: list[str] = [
    "__version__",
    "GeneratorConfig",
    "Grammar",
    "Rule",
    "PegTypesError",
    "GrammarError",
    "DuplicateRuleError",
    "UndefinedRuleError",
    "GrammarSyntaxError",
    "generate_types",
    "resolve_types",
    "parse_grammar",
]
