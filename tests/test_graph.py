import unittest

import pytest

from lazybind import CycleCheck, UndefinedDependencyError, ValidationResult, find_cycles, has_cycles, validate


SCC_GRAPH = {
    "a": ["b"],
    "b": ["c", "e", "f"],
    "c": ["d", "g"],
    "d": ["c", "h"],
    "e": ["a", "f"],
    "f": ["g"],
    "g": ["f"],
    "h": ["d", "g", "h"],
}


def test_acyclic_graph_has_no_cycles():
    graph = {"a": [], "b": [], "c": ["a", "b"], "digest": ["a", "b", "c"]}

    assert not has_cycles(graph)
    assert find_cycles(graph) == ()


def test_empty_graph_has_no_cycles():
    assert not has_cycles({})
    assert find_cycles({}) == ()


def test_self_loop():
    assert has_cycles({"a": ["a"]})
    assert find_cycles({"a": ["a"]}) == (("a",),)


def test_two_way_loop():
    assert has_cycles({"a": ["b"], "b": ["a"]})
    assert find_cycles({"a": ["b"], "b": ["a"]}) == (("a", "b"),)


def test_three_way_ring():
    graph = {"a": ["b"], "b": ["c"], "c": ["a"]}

    assert has_cycles(graph)
    assert find_cycles(graph) == (("a", "b", "c"),)


def test_three_independent_components():
    assert find_cycles(SCC_GRAPH) == (("f", "g"), ("a", "b", "e"), ("c", "d", "h"))


def test_components_do_not_depend_on_iteration_order():
    reversed_graph = dict(reversed(list(SCC_GRAPH.items())))
    reversed_edges = {member: list(reversed(deps)) for member, deps in SCC_GRAPH.items()}

    expected = find_cycles(SCC_GRAPH)
    assert find_cycles(reversed_graph) == expected
    assert find_cycles(reversed_edges) == expected


def test_back_edge_through_finished_sibling_stays_in_one_component():
    graph = {"a": ["b", "c"], "b": ["a"], "c": ["b"]}

    assert find_cycles(graph) == (("a", "b", "c"),)
    assert find_cycles({"a": ["b"], "b": ["c", "a"], "c": ["b"]}) == (("a", "b", "c"),)


def test_edge_into_closed_component_is_not_merged():
    visited_component_first = {"a": ["b"], "b": ["a"], "x": ["a"]}
    visited_dependant_first = {"x": ["a"], "a": ["b"], "b": ["a"]}

    assert find_cycles(visited_component_first) == (("a", "b"),)
    assert find_cycles(visited_dependant_first) == (("a", "b"),)


def test_self_loop_inside_larger_component_is_reported_once():
    graph = {"a": ["a", "b"], "b": ["a"]}

    assert find_cycles(graph) == (("a", "b"),)


def test_cycles_sorted_by_size_then_names():
    graph = {"z": ["z"], "b": ["a"], "a": ["b"], "c": ["c"], "q": ["r", "s"], "r": ["q"], "s": []}

    assert find_cycles(graph) == (("c",), ("z",), ("a", "b"), ("q", "r"))


def test_deep_chain_does_not_hit_recursion_limit():
    graph = {f"m{i}": [f"m{i + 1}"] for i in range(5000)}
    graph["m5000"] = []

    assert not has_cycles(graph)

    graph["m5000"] = ["m0"]
    assert len(find_cycles(graph)[0]) == 5001


class TestValidate(unittest.TestCase):
    def test_skip_never_reports_cycles(self):
        result = validate({"a": ["a"]}, CycleCheck.SKIP)

        assert result == ValidationResult(has_cycles=False)
        assert result.cycles is None

    def test_skip_does_not_inspect_graph(self):
        # An undefined dependency would be reported by any other mode.
        result = validate({"a": ["missing"]}, "skip")

        assert not result.has_cycles

    def test_simple_reports_presence_only(self):
        result = validate(SCC_GRAPH, CycleCheck.SIMPLE)

        assert result.has_cycles
        assert result.cycles is None

    def test_simple_is_default_mode(self):
        assert validate({"a": ["b"], "b": ["a"]}).has_cycles
        assert not validate({"a": ["b"], "b": []}).has_cycles

    def test_detailed_reports_cycles(self):
        result = validate(SCC_GRAPH, "detailed")

        assert result.has_cycles
        assert result.cycles == (("f", "g"), ("a", "b", "e"), ("c", "d", "h"))

    def test_detailed_on_acyclic_graph(self):
        result = validate({"a": [], "b": ["a"]}, CycleCheck.DETAILED)

        assert result == ValidationResult(has_cycles=False, cycles=())

    def test_simple_and_detailed_agree_on_cycle_presence(self):
        graphs = [
            {"a": ["a"]},
            {"a": ["b"], "b": []},
            {"a": ["b", "c"], "b": ["c"], "c": []},
            {"a": ["b"], "b": ["c"], "c": ["a"]},
            SCC_GRAPH,
        ]
        for graph in graphs:
            assert validate(graph, "simple").has_cycles == validate(graph, "detailed").has_cycles

    def test_invalid_mode_raises_value_error(self):
        with pytest.raises(ValueError):
            validate({}, "thorough")

    def test_undefined_dependency_raises(self):
        for mode in (CycleCheck.SIMPLE, CycleCheck.DETAILED):
            with pytest.raises(UndefinedDependencyError) as ctx:
                validate({"a": ["b", "zz"], "c": ["b"]}, mode)

            assert ctx.value.missing == ("b", "zz")
            assert "'a' -> 'b'" in str(ctx.value)
            assert "'c' -> 'b'" in str(ctx.value)

    def test_undefined_dependency_is_a_lookup_error(self):
        with pytest.raises(LookupError):
            has_cycles({"a": ["nope"]})
