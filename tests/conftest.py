"""
featuregraph Test Configuration and Fixtures

Factories for features and dependencies plus the reference graphs used
across the unit tests.
"""

import os

import pytest

from featuregraph import (
    Dependency,
    DependencyStrength,
    DependencyType,
    Feature,
    Priority,
    build_graph,
)
from featuregraph.bootstrap.config import reset_config


def make_feature(fid, complexity=1, priority=Priority.MEDIUM, name=None):
    """Feature with sensible defaults."""
    return Feature(
        id=fid,
        name=name or fid.title(),
        description=f"{fid} feature",
        priority=priority,
        complexity=complexity,
    )


def make_dependency(
    src,
    dst,
    strength=DependencyStrength.REQUIRED,
    dependency_type=DependencyType.TECHNICAL,
    confidence=1.0,
):
    """Edge src -> dst (src is the prerequisite)."""
    return Dependency(
        from_feature_id=src,
        to_feature_id=dst,
        dependency_type=dependency_type,
        strength=strength,
        confidence=confidence,
    )


@pytest.fixture
def feature():
    """Factory fixture: feature("a", complexity=3)."""
    return make_feature


@pytest.fixture
def dependency():
    """Factory fixture: dependency("a", "b", strength=...)."""
    return make_dependency


@pytest.fixture
def example_graph():
    """A(2) -> B(5) required, A -> C(3) optional."""
    return build_graph(
        [make_feature("A", 2), make_feature("B", 5), make_feature("C", 3)],
        [
            make_dependency("A", "B", DependencyStrength.REQUIRED),
            make_dependency("A", "C", DependencyStrength.OPTIONAL),
        ],
    )


@pytest.fixture
def two_node_cycle_graph():
    """X -> Y required, Y -> X optional."""
    return build_graph(
        [make_feature("X", 2), make_feature("Y", 4)],
        [
            make_dependency("X", "Y", DependencyStrength.REQUIRED),
            make_dependency("Y", "X", DependencyStrength.OPTIONAL),
        ],
    )


@pytest.fixture
def product_graph():
    """
    Small product backlog:

        auth(3) -> profile(2) -> settings(1)
        db(5)   -> api(4) -> dashboard(6)
        auth    -> api (recommended)
        docs(1) standalone, analytics(2) <- dashboard (optional)
    """
    features = [
        make_feature("auth", 3, Priority.HIGH),
        make_feature("profile", 2, Priority.MEDIUM),
        make_feature("settings", 1, Priority.LOW),
        make_feature("db", 5, Priority.HIGH),
        make_feature("api", 4, Priority.HIGH),
        make_feature("dashboard", 6, Priority.MEDIUM),
        make_feature("docs", 1, Priority.LOW),
        make_feature("analytics", 2, Priority.LOW),
    ]
    edges = [
        make_dependency("auth", "profile"),
        make_dependency("profile", "settings"),
        make_dependency("db", "api"),
        make_dependency("api", "dashboard"),
        make_dependency("auth", "api", DependencyStrength.RECOMMENDED),
        make_dependency("dashboard", "analytics", DependencyStrength.OPTIONAL),
    ]
    return build_graph(features, edges)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Isolate tests from user config files and FEATUREGRAPH_* variables."""
    for key in list(os.environ):
        if key.startswith("FEATUREGRAPH_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
