"""
Tests for binding parsed conditions to compiled selections.
"""

import pytest

from sigma2kql.core.clauses import And, FieldClause, Not, Or, UNSATISFIABLE
from sigma2kql.core.condition_parser import parse_condition
from sigma2kql.core.resolver import ConditionResolver, resolve_condition

SEL_A = FieldClause("a.field", "exact", ("a",))
SEL_B = FieldClause("b.field", "exact", ("b",))
FILTER = FieldClause("f.field", "exact", ("f",))


class TestConditionResolver:

    @pytest.fixture
    def selections(self):
        # Declaration order deliberately unsorted
        return {"selection_b": SEL_B, "filter": FILTER, "selection_a": SEL_A}

    def test_identifier(self, selections):
        assert resolve_condition(parse_condition("filter"), selections) == FILTER

    def test_filter_and_not_selection(self, selections):
        node = resolve_condition(parse_condition("filter and not selection_a"), selections)
        assert node == And((FILTER, Not(SEL_A)))

    def test_one_of_wildcard_sorted(self, selections):
        node = resolve_condition(parse_condition("1 of selection_*"), selections)
        assert node == Or((SEL_A, SEL_B))

    def test_all_of_wildcard(self, selections):
        node = resolve_condition(parse_condition("all of selection_*"), selections)
        assert node == And((SEL_A, SEL_B))

    def test_all_of_them(self, selections):
        node = resolve_condition(parse_condition("all of them"), selections)
        assert node == And((FILTER, SEL_A, SEL_B))

    def test_one_of_them(self, selections):
        node = resolve_condition(parse_condition("1 of them"), selections)
        assert node == Or((FILTER, SEL_A, SEL_B))

    def test_wildcard_order_independent_of_declaration(self):
        forward = {"sel_1": SEL_A, "sel_2": SEL_B}
        backward = {"sel_2": SEL_B, "sel_1": SEL_A}
        condition = parse_condition("1 of sel_*")

        assert resolve_condition(condition, forward) == resolve_condition(condition, backward)

    def test_bare_wildcard_is_one_of(self, selections):
        node = resolve_condition(parse_condition("selection_*"), selections)
        assert node == Or((SEL_A, SEL_B))

    def test_unknown_identifier_is_unsatisfiable(self, selections, caplog):
        node = resolve_condition(parse_condition("missing"), selections)
        assert node == UNSATISFIABLE
        assert "undefined selection 'missing'" in caplog.text

    def test_unknown_identifier_inside_expression(self, selections):
        node = resolve_condition(parse_condition("filter or missing"), selections)
        assert node == Or((FILTER, Or(())))

    def test_group_without_matches_is_unsatisfiable(self, selections):
        node = resolve_condition(parse_condition("all of nothing_*"), selections)
        assert node == UNSATISFIABLE

    def test_matching_names(self, selections):
        resolver = ConditionResolver(selections)
        assert resolver.matching_names(parse_condition("1 of sel*").target) == ["selection_a", "selection_b"]
