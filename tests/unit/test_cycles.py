"""
Unit tests for the cycle detector.

Tests Tarjan components, severity, break-edge selection and ordering of
reports.
"""

import logging

import pytest

from featuregraph import (
    CycleReport,
    CycleSeverity,
    DependencyStrength,
    build_graph,
    find_cycles,
)
from featuregraph.dependencies.cycles import (
    cyclic_components,
    strongly_connected_components,
)


class TestStronglyConnectedComponents:
    """Tests for strongly_connected_components()."""

    def test_every_node_in_one_component(self, product_graph):
        components = strongly_connected_components(product_graph)
        flat = sorted(n for c in components for n in c)
        assert flat == list(range(len(product_graph)))

    def test_acyclic_graph_has_singletons(self, product_graph):
        assert all(len(c) == 1 for c in strongly_connected_components(product_graph))
        assert cyclic_components(product_graph) == []

    def test_strength_filter(self, two_node_cycle_graph):
        """Without the optional back edge there is no cycle."""
        assert cyclic_components(two_node_cycle_graph) == [[0, 1]]
        assert cyclic_components(two_node_cycle_graph, {DependencyStrength.REQUIRED}) == []

    def test_long_chain_does_not_recurse(self, feature, dependency):
        """Deep graphs are handled without hitting the recursion limit."""
        n = 5000
        ids = [f"f{i:05d}" for i in range(n)]
        edges = [dependency(ids[i], ids[i + 1]) for i in range(n - 1)]
        edges.append(dependency(ids[-1], ids[0], DependencyStrength.OPTIONAL))
        graph = build_graph([feature(fid) for fid in ids], edges)

        components = cyclic_components(graph)
        assert len(components) == 1
        assert len(components[0]) == n


class TestFindCycles:
    """Tests for find_cycles()."""

    def test_no_cycles(self, example_graph):
        assert find_cycles(example_graph) == []

    def test_empty_graph(self):
        assert find_cycles(build_graph([], [])) == []

    def test_two_node_cycle(self, two_node_cycle_graph):
        """A required edge makes the cycle high severity; the optional edge breaks it."""
        reports = find_cycles(two_node_cycle_graph)
        assert len(reports) == 1
        report = reports[0]
        assert isinstance(report, CycleReport)
        assert set(report.cycle) == {"X", "Y"}
        assert report.cycle[0] == "X"
        assert report.severity is CycleSeverity.HIGH
        assert report.suggested_break_edge == ("Y", "X")
        assert report.breaks_component is True

    @pytest.mark.parametrize("strengths,expected", [
        ((DependencyStrength.REQUIRED, DependencyStrength.OPTIONAL), CycleSeverity.HIGH),
        ((DependencyStrength.RECOMMENDED, DependencyStrength.OPTIONAL), CycleSeverity.MEDIUM),
        ((DependencyStrength.OPTIONAL, DependencyStrength.OPTIONAL), CycleSeverity.LOW),
    ])
    def test_severity_from_strongest_edge(self, feature, dependency, strengths, expected):
        graph = build_graph(
            [feature("a"), feature("b")],
            [dependency("a", "b", strengths[0]), dependency("b", "a", strengths[1])],
        )
        assert find_cycles(graph)[0].severity is expected

    def test_break_edge_prefers_lower_confidence(self, feature, dependency):
        """Among equally strong edges the less certain one is cut."""
        graph = build_graph(
            [feature("a"), feature("b"), feature("c")],
            [
                dependency("a", "b", confidence=0.9),
                dependency("b", "c", confidence=0.6),
                dependency("c", "a", confidence=0.95),
            ],
        )
        report = find_cycles(graph)[0]
        assert report.suggested_break_edge == ("b", "c")
        assert report.breaks_component is True

    def test_break_edge_tie_uses_input_order(self, feature, dependency):
        graph = build_graph(
            [feature("a"), feature("b"), feature("c")],
            [dependency("b", "c"), dependency("c", "a"), dependency("a", "b")],
        )
        assert find_cycles(graph)[0].suggested_break_edge == ("b", "c")

    def test_break_edge_skips_non_splitting_pair(self, feature, dependency):
        """The weakest edge is passed over when cutting it leaves the cycle intact."""
        graph = build_graph(
            [feature("a"), feature("b"), feature("c")],
            [
                dependency("a", "b", DependencyStrength.REQUIRED),
                dependency("b", "a", DependencyStrength.OPTIONAL),
                dependency("b", "c", DependencyStrength.REQUIRED),
                dependency("c", "a", DependencyStrength.REQUIRED),
            ],
        )
        report = find_cycles(graph)[0]
        # Removing b -> a still leaves a -> b -> c -> a strongly connected
        assert report.suggested_break_edge != ("b", "a")
        assert report.suggested_break_edge == ("a", "b")
        assert report.breaks_component is True

    def test_dense_component_cannot_be_split(self, feature, dependency):
        """When no single cut splits the component the cheapest pair is reported."""
        ids = ["a", "b", "c"]
        edges = [dependency(s, d) for s in ids for d in ids if s != d]
        graph = build_graph([feature(fid) for fid in ids], edges)
        report = find_cycles(graph)[0]
        assert report.suggested_break_edge == ("a", "b")
        assert report.breaks_component is False
        assert report.size == 3

    def test_reports_ordered_by_first_member(self, feature, dependency):
        graph = build_graph(
            [feature("p"), feature("q"), feature("r"), feature("s"), feature("t")],
            [
                dependency("s", "t"), dependency("t", "s"),
                dependency("q", "p"), dependency("p", "q"),
                dependency("q", "r"),
            ],
        )
        reports = find_cycles(graph)
        assert [r.features for r in reports] == [frozenset({"p", "q"}), frozenset({"s", "t"})]

    def test_cycle_lists_every_member_once(self, feature, dependency):
        graph = build_graph(
            [feature(fid) for fid in "abcd"],
            [
                dependency("a", "b"), dependency("b", "c"),
                dependency("c", "d"), dependency("d", "b"),
            ],
        )
        report = find_cycles(graph)[0]
        assert sorted(report.cycle) == ["b", "c", "d"]
        assert report.cycle == ["b", "c", "d"]

    def test_to_dict(self, two_node_cycle_graph):
        data = find_cycles(two_node_cycle_graph)[0].to_dict()
        assert data == {
            "cycle": ["X", "Y"],
            "severity": "high",
            "suggested_break_edge": ["Y", "X"],
            "breaks_component": True,
        }

    def test_logs_warning(self, two_node_cycle_graph, caplog):
        with caplog.at_level(logging.WARNING, logger="featuregraph.dependencies.cycles"):
            find_cycles(two_node_cycle_graph)
        assert "Circular dependencies detected" in caplog.text
