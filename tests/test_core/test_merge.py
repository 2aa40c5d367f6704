"""Tests for the non-destructive configuration merge (archgen.core.merge).

Concrete examples first, then hypothesis properties over nested YAML-like
mappings: key union, base wins, identities, idempotence, no input mutation,
and safe_dump/safe_load round trips of the merged result.
"""

from __future__ import annotations

import copy

import pytest
import yaml
from hypothesis import given, settings
from hypothesis import strategies as st

from archgen.core.merge import has_conflict, merge, merge_with_report


pytestmark = pytest.mark.unit

PROPERTY_SETTINGS = settings(max_examples=200, deadline=None)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

keys = st.text(alphabet="abcdefgh", min_size=1, max_size=3)
scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-1000, max_value=1000),
    st.text(alphabet="abcxyz0123 :-", max_size=10),
)
yaml_values = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=3),
        st.dictionaries(keys, children, max_size=3),
    ),
    max_leaves=10,
)
mappings = st.dictionaries(keys, yaml_values, max_size=5)


# ---------------------------------------------------------------------------
# Examples
# ---------------------------------------------------------------------------


class TestMergeExamples:
    def test_base_wins_and_new_keys_added(self):
        assert merge({"a": 1}, {"a": 2, "b": 3}) == {"a": 1, "b": 3}

    def test_empty_base(self):
        assert merge({}, {"x": {"y": 1}}) == {"x": {"y": 1}}

    def test_nested_merge(self):
        assert merge({"x": {"y": 1}}, {"x": {"y": 2, "z": 3}}) == {"x": {"y": 1, "z": 3}}

    def test_mapping_vs_scalar_keeps_base(self):
        assert merge({"x": 1}, {"x": {"y": 2}}) == {"x": 1}
        assert merge({"x": {"y": 2}}, {"x": 1}) == {"x": {"y": 2}}

    def test_lists_are_not_merged(self):
        assert merge({"hosts": ["a"]}, {"hosts": ["b", "c"]}) == {"hosts": ["a"]}

    def test_key_order(self):
        result = merge({"b": 1, "a": 2}, {"c": 3, "a": 4})
        assert list(result) == ["b", "a", "c"]

    def test_spring_config(self):
        existing = {"spring": {"application": {"name": "user-service"}}}
        fragment = {"spring": {"data": {"redis": {"host": "localhost", "port": 6379}}}}
        assert merge(existing, fragment) == {
            "spring": {
                "application": {"name": "user-service"},
                "data": {"redis": {"host": "localhost", "port": 6379}},
            }
        }

    def test_result_shares_no_containers(self):
        base = {"a": {"list": [1, 2]}}
        overlay = {"b": {"nested": {"c": 1}}}
        result = merge(base, overlay)
        result["a"]["list"].append(3)
        result["b"]["nested"]["c"] = 99
        assert base == {"a": {"list": [1, 2]}}
        assert overlay == {"b": {"nested": {"c": 1}}}


class TestMergeWithReport:
    def test_reports_added_and_conflicts(self):
        result = merge_with_report(
            {"server": {"port": 8080}},
            {"server": {"port": 9090, "host": "0.0.0.0"}, "logging": {"level": "INFO"}},
        )
        assert result.merged == {
            "server": {"port": 8080, "host": "0.0.0.0"},
            "logging": {"level": "INFO"},
        }
        assert result.added_keys == ("server.host", "logging")
        assert result.conflicts == (
            "Key 'server.port' already exists with value '8080', "
            "keeping existing value (new value '9090' ignored)",
        )
        assert result.has_conflicts

    def test_equal_values_are_not_conflicts(self):
        result = merge_with_report({"a": {"b": 1}}, {"a": {"b": 1}})
        assert not result.has_conflicts
        assert result.added_keys_count == 0

    def test_has_conflict(self):
        assert has_conflict({"a": 1}, {"a": 2}, "a")
        assert not has_conflict({"a": 1}, {"a": 1}, "a")
        assert not has_conflict({"a": 1}, {"b": 2}, "a")

    def test_has_conflict_nested(self):
        base = {"spring": {"application": {"name": "user-service"}}}
        assert not has_conflict(base, {"spring": {"data": {"redis": {"host": "h"}}}}, "spring")
        assert has_conflict(base, {"spring": {"application": {"name": "other"}}}, "spring")
        assert has_conflict(base, {"spring": "flat"}, "spring")


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestMergeProperties:
    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_key_union(self, base, overlay):
        assert set(merge(base, overlay)) == set(base) | set(overlay)

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_has_conflict_agrees_with_report(self, base, overlay):
        reported = merge_with_report(base, overlay).has_conflicts
        assert any(has_conflict(base, overlay, key) for key in overlay) == reported

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_base_wins_non_mapping_conflicts(self, base, overlay):
        result = merge(base, overlay)
        for key, value in base.items():
            if not (isinstance(value, dict) and isinstance(overlay.get(key), dict)):
                assert result[key] == value

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_overlay_only_keys_pass_through(self, base, overlay):
        result = merge(base, overlay)
        for key in set(overlay) - set(base):
            assert result[key] == overlay[key]

    @PROPERTY_SETTINGS
    @given(mappings)
    def test_identities_and_idempotence(self, m):
        assert merge(m, {}) == m
        assert merge({}, m) == m
        assert merge(m, m) == m

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_disjoint_keys_commute_on_key_set(self, base, overlay):
        overlay = {k: v for k, v in overlay.items() if k not in base}
        assert set(merge(base, overlay)) == set(merge(overlay, base))

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_inputs_not_mutated(self, base, overlay):
        base_before = copy.deepcopy(base)
        overlay_before = copy.deepcopy(overlay)
        merge(base, overlay)
        merge_with_report(base, overlay)
        assert base == base_before
        assert overlay == overlay_before

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_report_agrees_with_merge(self, base, overlay):
        assert merge_with_report(base, overlay).merged == merge(base, overlay)

    @PROPERTY_SETTINGS
    @given(mappings, mappings)
    def test_yaml_round_trip(self, base, overlay):
        result = merge(base, overlay)
        assert yaml.safe_load(yaml.safe_dump(result, sort_keys=False)) == result
