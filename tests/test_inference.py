# tests/test_inference.py
"""
Tests for structural type inference and override resolution.
"""

import pytest

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
from pegtypes.inference import TypeInferencer, pure_reference
from pegtypes.overrides import resolve_overrides
from pegtypes.typeexpr import (
    NULL,
    STRING,
    UNDEFINED,
    ArrayType,
    LiteralType,
    RawType,
    TypeRef,
    UnionType,
)


def _infer(rules, return_types=None, fallback="string[]"):
    g = Grammar(rules)
    return TypeInferencer(g, resolve_overrides(g, return_types), fallback).infer_all()


def _render(expr):
    return expr.render(lambda name: name)


class TestOverrideResolution:

    def test_partition(self):
        g = Grammar([Rule("a", AnyCharacter()), Rule("b", AnyCharacter())])
        res = resolve_overrides(g, {"b": "number"})
        assert res.explicit == {"b": "number"}
        assert res.pending == ["a"]
        assert res.is_explicit("b")
        assert not res.is_explicit("a")

    def test_unknown_keys_are_recorded_not_raised(self):
        g = Grammar([Rule("a", AnyCharacter())])
        res = resolve_overrides(g, {"nope": "number", "a": "string"})
        assert res.unmatched == ["nope"]
        assert res.pending == []

    def test_none_mapping(self):
        g = Grammar([Rule("a", AnyCharacter())])
        res = resolve_overrides(g, None)
        assert res.explicit == {}
        assert res.pending == ["a"]


class TestLiteralSets:

    def test_single_literal(self):
        types = _infer([Rule("a", LiteralSet(("x",)))])
        assert types["a"] == LiteralType("x")

    def test_order_preserved_and_duplicates_collapse(self):
        types = _infer([Rule("a", LiteralSet(("b", "a", "b", "c")))])
        assert _render(types["a"]) == '"b" | "a" | "c"'

    def test_ignore_case_is_string(self):
        types = _infer([Rule("a", LiteralSet(("x",), ignore_case=True))])
        assert types["a"] == STRING


class TestAlternation:

    def test_union_of_references_in_order(self):
        types = _infer([
            Rule("s", Alternation((RuleRef("a"), RuleRef("b"), RuleRef("a")))),
            Rule("a", LiteralSet(("x",))),
            Rule("b", LiteralSet(("y",))),
        ])
        assert types["s"] == UnionType((TypeRef("a"), TypeRef("b")))

    def test_nested_unions_flatten(self):
        types = _infer([
            Rule("s", Alternation((
                LiteralSet(("x", "y")),
                RuleRef("z"),
                LiteralSet(("y", "w")),
            ))),
            Rule("z", AnyCharacter()),
        ])
        assert _render(types["s"]) == '"x" | "y" | z | "w"'

    def test_identical_alternatives_collapse(self):
        types = _infer([Rule("s", Alternation((CharacterClass("[a]"), AnyCharacter())))])
        assert types["s"] == STRING


class TestPureReferences:

    def test_takes_referenced_inferred_type(self):
        types = _infer([
            Rule("a", RuleRef("b")),
            Rule("b", LiteralSet(("x", "y"))),
        ])
        assert types["a"] == types["b"]
        assert _render(types["a"]) == '"x" | "y"'

    def test_takes_explicit_text_verbatim(self):
        types = _infer(
            [Rule("a", RuleRef("b")), Rule("b", AnyCharacter())],
            {"b": "Foo<Bar>"},
        )
        assert types["a"] == RawType("Foo<Bar>")

    def test_chain(self):
        types = _infer([
            Rule("a", RuleRef("b")),
            Rule("b", RuleRef("c")),
            Rule("c", CharacterClass("[0-9]")),
        ])
        assert types["a"] == types["b"] == types["c"] == STRING

    def test_single_alternative_choice_is_pure(self):
        assert pure_reference(Alternation((RuleRef("x"),))) == "x"
        assert pure_reference(Alternation((RuleRef("x"), RuleRef("y")))) is None
        assert pure_reference(Capture(RuleRef("x"), label="v")) is None

    def test_two_cycle_uses_opaque_references(self):
        types = _infer([Rule("a", RuleRef("b")), Rule("b", RuleRef("a"))])
        assert types["a"] == TypeRef("b")
        assert types["b"] == TypeRef("a")

    def test_three_cycle_with_tail(self):
        types = _infer([
            Rule("d", RuleRef("a")),
            Rule("a", RuleRef("b")),
            Rule("b", RuleRef("c")),
            Rule("c", RuleRef("a")),
        ])
        assert types["a"] == TypeRef("b")
        assert types["b"] == TypeRef("c")
        assert types["c"] == TypeRef("a")
        assert types["d"] == TypeRef("a")

    def test_chain_into_cycle_references_entry_rule(self):
        types = _infer([
            Rule("d", RuleRef("a")),
            Rule("a", RuleRef("b")),
            Rule("b", RuleRef("a")),
        ])
        assert types["d"] == TypeRef("a")
        assert types["a"] == TypeRef("b")
        assert types["b"] == TypeRef("a")

    def test_cycle_resolved_before_tail(self):
        g = Grammar([
            Rule("a", RuleRef("b")),
            Rule("b", RuleRef("a")),
            Rule("e", RuleRef("f")),
            Rule("f", RuleRef("b")),
        ])
        inferencer = TypeInferencer(g, resolve_overrides(g))
        assert inferencer.resolve("a") == TypeRef("b")
        assert inferencer.resolve("e") == TypeRef("b")

    def test_self_reference(self):
        types = _infer([Rule("a", RuleRef("a"))])
        assert types["a"] == TypeRef("a")

    def test_long_chain_does_not_recurse(self):
        n = 5000
        rules = [Rule(f"r{i}", RuleRef(f"r{i + 1}")) for i in range(n)]
        rules.append(Rule(f"r{n}", LiteralSet(("end",))))
        types = _infer(rules)
        assert types["r0"] == LiteralType("end")


class TestStructures:

    def test_repetition_is_array(self):
        types = _infer([Rule("a", Repetition(CharacterClass("[ \\t]")))])
        assert _render(types["a"]) == "string[]"

    def test_array_of_union_is_parenthesised(self):
        types = _infer([Rule("a", Repetition(LiteralSet(("x", "y")), at_least_one=True))])
        assert _render(types["a"]) == '("x" | "y")[]'

    def test_references_inside_structures_are_opaque(self):
        types = _infer([
            Rule("list", Repetition(RuleRef("item"))),
            Rule("item", Alternation((RuleRef("list"), LiteralSet(("x",))))),
        ])
        assert _render(types["list"]) == "item[]"
        assert _render(types["item"]) == 'list | "x"'

    def test_optional_adds_null(self):
        types = _infer([Rule("a", OptionalMatch(LiteralSet(("x",))))])
        assert types["a"] == UnionType((LiteralType("x"), NULL))

    def test_text_is_string(self):
        types = _infer([Rule("a", Text(Sequence((LiteralSet(("x",)), AnyCharacter()))))])
        assert types["a"] == STRING

    def test_predicates_are_undefined(self):
        types = _infer([
            Rule("a", Predicate(LiteralSet(("x",)))),
            Rule("b", Predicate(None, negated=True, code="{ return false; }")),
        ])
        assert types["a"] == UNDEFINED
        assert types["b"] == UNDEFINED

    def test_labeled_capture_is_transparent(self):
        types = _infer([Rule("a", Capture(LiteralSet(("x",)), label="value"))])
        assert types["a"] == LiteralType("x")


class TestFallback:

    def test_sequence_falls_back(self):
        types = _infer([Rule("a", Sequence((LiteralSet(("x",)), AnyCharacter())))])
        assert types["a"] == RawType("string[]")

    def test_action_falls_back(self):
        types = _infer([Rule("a", Action(LiteralSet(("x",)), "{ return 1; }"))])
        assert types["a"] == RawType("string[]")

    def test_single_pluck_gives_element_type(self):
        body = Sequence((
            LiteralSet(("(",)),
            Capture(RuleRef("e"), pluck=True),
            LiteralSet((")",)),
        ))
        types = _infer([Rule("a", body), Rule("e", AnyCharacter())])
        assert types["a"] == TypeRef("e")

    def test_two_plucks_fall_back(self):
        body = Sequence((
            Capture(AnyCharacter(), pluck=True),
            Capture(AnyCharacter(), pluck=True),
        ))
        types = _infer([Rule("a", body)])
        assert types["a"] == RawType("string[]")

    def test_configurable_fallback(self):
        types = _infer([Rule("a", Action(AnyCharacter(), "{}"))], fallback="unknown")
        assert types["a"] == RawType("unknown")

    @pytest.mark.parametrize("fallback, expected", [
        ("unknown", "unknown[]"),
        ("string[]", "string[][]"),
        ("A | B", "(A | B)[]"),
    ])
    def test_fallback_inside_array(self, fallback, expected):
        body = Repetition(Action(AnyCharacter(), "{}"))
        types = _infer([Rule("a", body)], fallback=fallback)
        assert _render(types["a"]) == expected


class TestExplicitTypes:

    def test_explicit_ignores_structure(self):
        types = _infer([Rule("a", LiteralSet(("x",)))], {"a": "number"})
        assert types["a"] == RawType("number")

    def test_malformed_text_passes_through(self):
        types = _infer([Rule("a", AnyCharacter())], {"a": "{{ not a type"})
        assert _render(types["a"]) == "{{ not a type"

    def test_every_rule_typed_once(self, arithmetic_graph):
        res = resolve_overrides(arithmetic_graph, {"Term": "number"})
        types = TypeInferencer(arithmetic_graph, res).infer_all()
        assert list(types) == arithmetic_graph.names
