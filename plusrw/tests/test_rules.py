"""Tests for the built-in rewrite rules."""

import pytest
from plusrw import (
    E, Leaf, Rule, RULES, associate, commute, apply_rule, list_rules, get_rule,
    equivalent, parse,
)
from plusrw.rules import canonical_name, associativity, commutativity, parenthesis_removal


class TestAssociativity:
    """Tests for the associativity rule."""

    def test_forward(self):
        """(x + y) + z => x + (y + z)"""
        assert apply_rule("associativity", "((x + y) + z)") == "(x + (y + z))"

    def test_reverse(self):
        """x + (y + z) => (x + y) + z"""
        assert apply_rule("associativity", "(x + (y + z))") == "((x + y) + z)"

    def test_forward_tried_first(self):
        """When both children are sums the left one is regrouped."""
        assert apply_rule("associativity", "((a + b) + (c + d))") == "(a + (b + (c + d)))"

    def test_forward_then_reverse_restores_structure(self):
        start = "((x + y) + z)"
        there = apply_rule("associativity", start)
        back = apply_rule("associativity", there)
        assert parse(back) == parse(start)

    def test_no_nested_sum_is_noop(self):
        assert apply_rule("associativity", "(x + y)") == "(x + y)"

    def test_noop_returns_input_verbatim(self):
        """A no-op returns the very text it was given, spacing included."""
        assert apply_rule("associativity", "x+y") == "x+y"

    def test_tree_level(self):
        assert associate(E("((x + y) + z)")) == E("(x + (y + z))")
        assert associate(E("x + y")) is None
        assert associate(Leaf("x")) is None


class TestCommutativity:
    """Tests for the commutativity rule."""

    def test_swap(self):
        assert apply_rule("commutativity", "(x + (y + z))") == "((y + z) + x)"

    def test_swap_simple(self):
        assert apply_rule("commutativity", "(x + y)") == "(y + x)"

    def test_output_is_canonical(self):
        assert apply_rule("commutativity", "x+y") == "(y + x)"

    @pytest.mark.parametrize("expr", ["(x + y)", "((x + y) + z)", "(x + (y + z))", "((a + b) + (c + d))"])
    def test_involution(self, expr):
        """Swapping twice gives back the canonical rendering."""
        once = apply_rule("commutativity", expr)
        assert once != expr
        assert apply_rule("commutativity", once) == expr

    def test_tree_level(self):
        assert commute(E("x + y")) == E("y + x")
        assert commute(Leaf("x")) is None


class TestParenthesisRemoval:
    """Tests for the parenthesis-removal rule."""

    def test_inner_group(self):
        assert apply_rule("parenthesis-removal", "(x + (y + z))") == "(x + y + z)"

    def test_left_group(self):
        assert apply_rule("parenthesis-removal", "((x + y) + z)") == "(x + y + z)"

    def test_outer_parens_of_simple_sum(self):
        assert apply_rule("parenthesis-removal", "(x + y)") == "x + y"

    def test_single_pass(self):
        """Only groups without nested parens are unwrapped per call."""
        assert apply_rule("parenthesis-removal", "(((a + b) + c) + d)") == "((a + b + c) + d)"

    def test_repeated_application_reaches_fixed_point(self):
        once = apply_rule("parenthesis-removal", "(((a + b) + c) + d)")
        assert apply_rule("parenthesis-removal", once) == once

    def test_flat_result_is_stable(self):
        assert apply_rule("parenthesis-removal", "(x + y + z)") == "(x + y + z)"

    def test_rerenders_input(self):
        """Non-canonical input is rendered before unwrapping."""
        assert apply_rule("parenthesis-removal", "x+y+z") == "(x + y + z)"


class TestNoOps:
    """Rules never change a bare identifier."""

    @pytest.mark.parametrize("rule", ["associativity", "commutativity", "parenthesis-removal"])
    def test_leaf_is_noop(self, rule):
        assert apply_rule(rule, "x") == "x"

    @pytest.mark.parametrize("rule", RULES, ids=lambda r: r.name)
    def test_matches_false_for_leaf(self, rule):
        assert rule.matches("x") == False


class TestEquivalencePreserved:
    """Every rule keeps the same multiset of identifiers."""

    @pytest.mark.parametrize("rule", RULES, ids=lambda r: r.name)
    @pytest.mark.parametrize("expr", [
        "((x + y) + z)", "(x + (y + z))", "((a + b) + (c + d))", "(((a + b) + c) + d)", "a+b+c",
    ])
    def test_equivalent(self, rule, expr):
        assert equivalent(parse(rule.apply(expr)), parse(expr))


class TestRuleTable:
    """Tests for rule metadata and lookup."""

    def test_display_order(self):
        assert [r.name for r in RULES] == ["associativity", "commutativity", "parenthesis-removal"]

    def test_list_rules(self):
        listed = list_rules()
        assert [r["name"] for r in listed] == ["associativity", "commutativity", "parenthesis-removal"]
        assert all(set(r) == {"name", "description"} for r in listed)
        assert all(r["description"] for r in listed)

    def test_rules_are_functions_of_text(self):
        assert RULES[0]("((x + y) + z)") == associativity("((x + y) + z)")
        assert RULES[1].func is commutativity
        assert RULES[2].func is parenthesis_removal

    def test_rule_is_immutable(self):
        rule = RULES[0]
        with pytest.raises(AttributeError):
            rule.name = "other"

    def test_rule_repr(self):
        assert repr(RULES[1]).startswith("@commutativity")

    def test_rule_equality(self):
        assert Rule("r", "d", commutativity) == Rule("r", "d", commutativity)
        assert Rule("r", "d", commutativity) != Rule("r", "d", associativity)

    @pytest.mark.parametrize("name,expected", [
        ("associativity", "associativity"),
        ("Associativity", "associativity"),
        ("  COMMUTATIVITY ", "commutativity"),
        ("parenthesis_removal", "parenthesis-removal"),
        ("parenthesis removal", "parenthesis-removal"),
        ("assoc", "associativity"),
        ("comm", "commutativity"),
        ("parens", "parenthesis-removal"),
    ])
    def test_canonical_name(self, name, expected):
        assert canonical_name(name) == expected

    def test_get_rule_by_alias(self):
        assert get_rule("parens") is RULES[2]

    def test_get_rule_unknown(self):
        assert get_rule("distributivity") is None

    def test_apply_rule_unknown_raises(self):
        with pytest.raises(KeyError):
            apply_rule("distributivity", "(x + y)")
