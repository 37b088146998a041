"""
Unit tests for the graph store.

Tests build_graph() validation, duplicate merging, adjacency and
fingerprints.
"""

import networkx as nx
import pytest

from featuregraph import (
    Dependency,
    DependencyStrength,
    DependencyType,
    DuplicateFeatureError,
    ErrorKind,
    FeatureGraph,
    GraphError,
    InvalidDependencyError,
    InvalidFeatureError,
    SelfDependencyError,
    UnknownFeatureError,
    build_graph,
)


class TestBuildGraphValidation:
    """Tests for rejected inputs."""

    def test_empty_graph_is_valid(self):
        """An empty feature set is not an error."""
        graph = build_graph([], [])
        assert len(graph) == 0
        assert graph.edges == ()

    def test_unknown_feature(self, feature, dependency):
        with pytest.raises(UnknownFeatureError) as exc:
            build_graph([feature("a")], [dependency("a", "ghost")])
        assert exc.value.feature_id == "ghost"
        assert exc.value.kind is ErrorKind.UNKNOWN_FEATURE
        assert exc.value.index == 0

    def test_self_dependency(self, feature, dependency):
        with pytest.raises(SelfDependencyError) as exc:
            build_graph([feature("a")], [dependency("a", "a")])
        assert exc.value.feature_id == "a"
        assert exc.value.edge.pair == ("a", "a")

    def test_unknown_checked_before_self_loop(self, feature, dependency):
        """A self loop on an unknown id reports the unknown id."""
        with pytest.raises(UnknownFeatureError):
            build_graph([feature("a")], [dependency("ghost", "ghost")])

    def test_duplicate_feature(self, feature):
        with pytest.raises(DuplicateFeatureError) as exc:
            build_graph([feature("a"), feature("b"), feature("a")], [])
        assert exc.value.feature_id == "a"
        assert exc.value.index == 2

    @pytest.mark.parametrize("complexity", [0, 11, -1, 2.5, True, "3"])
    def test_complexity_out_of_range(self, feature, complexity):
        with pytest.raises(InvalidFeatureError):
            build_graph([feature("a", complexity=complexity)], [])

    @pytest.mark.parametrize("complexity", [1, 10])
    def test_complexity_bounds_inclusive(self, feature, complexity):
        graph = build_graph([feature("a", complexity=complexity)], [])
        assert graph.feature("a").complexity == complexity

    def test_empty_id(self, feature):
        with pytest.raises(InvalidFeatureError):
            build_graph([feature("  ", name="blank")], [])

    def test_malformed_feature_dict(self):
        with pytest.raises(InvalidFeatureError) as exc:
            build_graph([{"id": "a", "priority": "urgent"}], [])
        assert exc.value.feature_id == "a"

    def test_unsupported_feature_type(self):
        with pytest.raises(InvalidFeatureError):
            build_graph(["a"], [])

    @pytest.mark.parametrize("confidence", [-0.1, 1.5, float("nan")])
    def test_confidence_out_of_range(self, feature, dependency, confidence):
        with pytest.raises(InvalidDependencyError):
            build_graph(
                [feature("a"), feature("b")],
                [dependency("a", "b", confidence=confidence)],
            )

    def test_malformed_dependency_dict(self, feature):
        with pytest.raises(InvalidDependencyError) as exc:
            build_graph(
                [feature("a"), feature("b")],
                [{"from_feature_id": "a", "to_feature_id": "b", "strength": "maybe"}],
            )
        assert exc.value.kind is ErrorKind.INVALID_DEPENDENCY

    @pytest.mark.parametrize("endpoint", [["a"], None, 7])
    def test_non_string_endpoint(self, endpoint):
        with pytest.raises(InvalidDependencyError) as exc:
            build_graph(
                [{"id": "a"}],
                [{"from_feature_id": endpoint, "to_feature_id": "a"}],
            )
        assert exc.value.index == 0

    def test_non_string_reason(self, feature):
        with pytest.raises(InvalidDependencyError):
            build_graph(
                [feature("a"), feature("b")],
                [{"from_feature_id": "a", "to_feature_id": "b", "reason": {"why": 1}}],
            )

    @pytest.mark.parametrize("field", ["name", "description"])
    def test_non_string_text_fields(self, field):
        """name and description are rejected when present but not strings."""
        with pytest.raises(InvalidFeatureError) as exc:
            build_graph([{"id": "a", field: 5}], [])
        assert exc.value.feature_id == "a"

    def test_null_name_rejected(self):
        with pytest.raises(InvalidFeatureError):
            build_graph([{"id": "a", "name": None}], [])

    def test_null_description_defaults_to_empty(self):
        graph = build_graph([{"id": "a", "description": None}], [])
        assert graph.feature("a").description == ""

    def test_features_validated_before_edges(self, feature, dependency):
        """The first invalid feature wins over an earlier invalid edge."""
        with pytest.raises(DuplicateFeatureError):
            build_graph([feature("a"), feature("a")], [dependency("a", "ghost")])

    def test_first_bad_edge_reported(self, feature, dependency):
        with pytest.raises(GraphError) as exc:
            build_graph(
                [feature("a"), feature("b")],
                [dependency("a", "b"), dependency("b", "b"), dependency("a", "zzz")],
            )
        assert isinstance(exc.value, SelfDependencyError)
        assert exc.value.index == 1

    def test_error_to_dict(self, feature, dependency):
        with pytest.raises(GraphError) as exc:
            build_graph([feature("a")], [dependency("a", "b")])
        data = exc.value.to_dict()
        assert data["kind"] == "unknown_feature"
        assert data["feature_id"] == "b"
        assert data["edge"]["from_feature_id"] == "a"


class TestDuplicateEdges:
    """Tests for duplicate edge merging."""

    def test_keeps_higher_strength(self, feature, dependency):
        graph = build_graph(
            [feature("a"), feature("b")],
            [
                dependency("a", "b", DependencyStrength.OPTIONAL),
                dependency("a", "b", DependencyStrength.REQUIRED),
                dependency("a", "b", DependencyStrength.RECOMMENDED),
            ],
        )
        assert len(graph.edges) == 1
        assert graph.edges[0].strength is DependencyStrength.REQUIRED

    def test_different_types_are_kept(self, feature, dependency):
        graph = build_graph(
            [feature("a"), feature("b")],
            [
                dependency("a", "b", dependency_type=DependencyType.TECHNICAL),
                dependency("a", "b", dependency_type=DependencyType.BUSINESS),
            ],
        )
        assert len(graph.edges) == 2
        assert graph.successors(graph.index_of("a")) == [graph.index_of("b")]

    def test_merged_edge_keeps_first_slot(self, feature, dependency):
        graph = build_graph(
            [feature("a"), feature("b"), feature("c")],
            [
                dependency("a", "b", DependencyStrength.OPTIONAL),
                dependency("b", "c"),
                dependency("a", "b", DependencyStrength.REQUIRED),
            ],
        )
        assert [e.pair for e in graph.edges] == [("a", "b"), ("b", "c")]


class TestFeatureGraph:
    """Tests for FeatureGraph accessors."""

    def test_accepts_dicts(self):
        graph = build_graph(
            [{"id": "a", "complexity": 2}, {"id": "b", "priority": "high"}],
            [{"from_feature_id": "a", "to_feature_id": "b", "type": "logical"}],
        )
        assert isinstance(graph, FeatureGraph)
        assert "a" in graph and "b" in graph
        assert graph.edges[0].dependency_type is DependencyType.LOGICAL

    def test_adjacency(self, example_graph):
        a = example_graph.index_of("A")
        b = example_graph.index_of("B")
        c = example_graph.index_of("C")
        assert example_graph.successors(a) == [b, c]
        assert example_graph.successors(a, {DependencyStrength.REQUIRED}) == [b]
        assert example_graph.predecessors(c) == [a]
        assert example_graph.predecessors(c, {DependencyStrength.REQUIRED}) == []

    def test_edges_within(self, example_graph):
        members = {example_graph.index_of("A"), example_graph.index_of("B")}
        assert example_graph.edges_within(members) == [0]

    def test_unknown_lookup_raises_key_error(self, example_graph):
        with pytest.raises(KeyError):
            example_graph.index_of("Z")

    def test_repr(self, example_graph):
        assert repr(example_graph) == "FeatureGraph(features=3, edges=2)"


class TestNetworkxExport:
    """Tests for FeatureGraph.to_networkx()."""

    def test_nodes_and_edges(self, example_graph):
        G = example_graph.to_networkx()
        assert isinstance(G, nx.MultiDiGraph)
        assert list(G.nodes) == ["A", "B", "C"]
        assert G.nodes["B"]["complexity"] == 5
        assert G.nodes["A"]["priority"] == "medium"
        assert G.number_of_edges() == 2
        assert G.edges["A", "C", "technical"]["strength"] == "optional"

    def test_strength_filter(self, example_graph):
        G = example_graph.to_networkx({DependencyStrength.REQUIRED})
        assert list(G.edges()) == [("A", "B")]
        assert G.number_of_nodes() == 3

    def test_parallel_types_kept(self, feature, dependency):
        graph = build_graph(
            [feature("a"), feature("b")],
            [
                dependency("a", "b", dependency_type=DependencyType.TECHNICAL),
                dependency("a", "b", dependency_type=DependencyType.BUSINESS),
            ],
        )
        assert graph.to_networkx().number_of_edges("a", "b") == 2


class TestFingerprint:
    """Tests for FeatureGraph.fingerprint()."""

    def test_stable_for_equal_input(self, feature, dependency):
        one = build_graph([feature("a"), feature("b")], [dependency("a", "b")])
        two = build_graph([feature("a"), feature("b")], [dependency("a", "b")])
        assert one.fingerprint() == two.fingerprint()

    def test_changes_with_edges(self, feature, dependency):
        one = build_graph([feature("a"), feature("b")], [dependency("a", "b")])
        two = build_graph(
            [feature("a"), feature("b")],
            [dependency("a", "b", DependencyStrength.OPTIONAL)],
        )
        assert one.fingerprint() != two.fingerprint()

    def test_changes_with_complexity(self, feature):
        one = build_graph([feature("a", complexity=1)], [])
        two = build_graph([feature("a", complexity=2)], [])
        assert one.fingerprint() != two.fingerprint()

    def test_is_hex_digest(self, example_graph):
        digest = example_graph.fingerprint()
        assert len(digest) == 64
        int(digest, 16)

    def test_dependency_records_unchanged(self, feature):
        """Records passed in are stored as given."""
        dep = Dependency(from_feature_id="a", to_feature_id="b", reason="r")
        graph = build_graph([feature("a"), feature("b")], [dep])
        assert graph.edges[0] is dep
