"""Tests for scope resolution (only / with_dependencies / without_dependencies)."""

import pytest

from dagplan.dependency.graph import DAG
from dagplan.dependency.options import (
    SortOptions,
    only,
    with_dependencies,
    without_dependencies,
)
from dagplan.dependency.planner import ScopeResolver
from dagplan.dependency.topology import NodeInfo
from dagplan.utils.exceptions import UnhandledDependency, UnhandledDependencyError


class TestSortOptions:
    """Test option merging."""

    def test_only_accumulates(self):
        """Test repeated only() calls accumulate keys."""
        merged = SortOptions().merge(only("a")).merge(only("b", "c"))

        assert merged.only == ["a", "b", "c"]
        assert merged.scoped is True

    def test_flags_stick_once_set(self):
        """Test boolean flags cannot be switched off by later options."""
        merged = with_dependencies().merge(SortOptions())

        assert merged.with_dependencies is True
        assert merged.without_dependencies is False

    def test_default_is_unscoped(self):
        """Test empty options mean no restriction."""
        assert SortOptions().scoped is False


class TestScopedPlans:
    """Test the dependency policies on the services graph."""

    def test_only_without_policy_fails(self, services_graph):
        """Test an unselected dependency of selected nodes is an error."""
        with pytest.raises(UnhandledDependencyError) as exc_info:
            services_graph.plan(only("db", "mesh"))

        assert str(exc_info.value) == '"net" depended by "db" and "mesh" is not included'
        unhandled = exc_info.value.unhandled_dependencies
        assert len(unhandled) == 1
        assert unhandled[0].id == "net"
        assert unhandled[0].dependents == ["db", "mesh"]

    def test_only_without_dependencies(self, services_graph):
        """Test without_dependencies drops unselected dependencies."""
        topology = services_graph.plan(only("db", "mesh"), without_dependencies())

        assert str(topology) == "db, mesh"

    def test_only_with_dependencies(self, services_graph):
        """Test with_dependencies pulls dependencies in."""
        topology = services_graph.plan(only("db", "mesh"), with_dependencies())

        assert str(topology) == "net -> db, mesh"

    def test_keyword_form(self, services_graph):
        """Test keyword arguments behave like option values."""
        topology = services_graph.plan(only=["db", "mesh"], with_dependencies=True)

        assert str(topology) == "net -> db, mesh"

    def test_with_dependencies_is_transitive(self, services_graph):
        """Test dependencies of pulled-in dependencies are included too."""
        topology = services_graph.plan(only("web"), with_dependencies())

        assert str(topology) == "cache, net -> db -> api -> web"

    def test_without_dependencies_single_node(self, services_graph):
        """Test selecting a downstream node alone."""
        topology = services_graph.plan(only("web"), without_dependencies())

        assert str(topology) == "web"

    def test_only_all_nodes_equals_unscoped(self, services_graph):
        """Test selecting every node gives the unscoped plan."""
        scoped = services_graph.plan(only(*services_graph.nodes))

        assert str(scoped) == str(services_graph.plan())

    def test_only_roots_needs_no_policy(self, services_graph):
        """Test selecting nodes without dependencies never fails."""
        assert str(services_graph.plan(only("net", "cache"))) == "cache, net"

    def test_irrelevant_nodes_are_dropped(self, services_graph):
        """Test nodes unrelated to the selection are excluded silently."""
        topology = services_graph.plan(only("mesh"), with_dependencies())

        assert str(topology) == "net -> mesh"
        assert "cache" not in topology.flatten()

    def test_empty_levels_are_dropped(self, services_graph):
        """Test the scoped plan has fewer levels than the full one."""
        topology = services_graph.plan(only("api"), without_dependencies())

        assert len(topology) == 1
        assert topology.keys() == [["api"]]

    def test_unknown_selected_key_is_ignored(self, services_graph):
        """Test selecting a key that is not a node does not fail."""
        topology = services_graph.plan(only("net", "nope"))

        assert str(topology) == "net"

    def test_first_offending_dependency_reported(self, services_graph):
        """Test only the most downstream missing dependency is reported."""
        with pytest.raises(UnhandledDependencyError) as exc_info:
            services_graph.plan(only("web"))

        assert str(exc_info.value) == '"api" depended by "web" is not included'

    def test_reported_dependency_is_smallest_key_of_level(self):
        """Test the reported dependency does not depend on registration order."""
        graph = DAG()
        graph.add("y")
        graph.add("x")
        graph.add("s", dependencies=["y", "x"])

        with pytest.raises(UnhandledDependencyError) as exc_info:
            graph.plan(only=["s"])

        assert str(exc_info.value) == '"x" depended by "s" is not included'
        assert exc_info.value.unhandled_dependencies[0].id == "x"

    def test_three_dependents_message(self):
        """Test the Oxford-comma form with three or more dependents."""
        graph = DAG()
        graph.add("base")
        for name in ("x", "y", "z"):
            graph.add(name, dependencies=["base"])

        with pytest.raises(UnhandledDependencyError) as exc_info:
            graph.plan(only("z", "x", "y"))

        assert str(exc_info.value) == '"base" depended by "x", "y", and "z" is not included'

    def test_without_wins_over_with(self, services_graph):
        """Test without_dependencies takes precedence when both flags are set."""
        topology = services_graph.plan(only("db"), with_dependencies(), without_dependencies())

        assert str(topology) == "db"

    def test_scoped_plan_is_deterministic(self, services_graph):
        """Test repeated scoped plans are identical and never mutate the graph."""
        first = services_graph.plan(only("web"), with_dependencies())
        second = services_graph.plan(only("web"), with_dependencies())

        assert str(first) == str(second)
        assert str(services_graph.plan()) == "cache, net -> db, mesh -> api -> web"


class TestScopeResolver:
    """Test the resolver in isolation."""

    def test_resolve_unscoped_sorts_levels(self):
        """Test levels are sorted by key and empty levels dropped."""
        levels = [[NodeInfo("b"), NodeInfo("a")], []]

        topology = ScopeResolver({}, SortOptions()).resolve(levels)

        assert topology.keys() == [["a", "b"]]

    def test_resolver_does_not_mutate_options(self):
        """Test growing the selection leaves the caller's options untouched."""
        options = SortOptions(only=["b"], with_dependencies=True)
        levels = [[NodeInfo("a")], [NodeInfo("b")]]

        topology = ScopeResolver({"a": {"b": None}}, options).resolve(levels)

        assert topology.keys() == [["a"], ["b"]]
        assert options.only == ["b"]


class TestUnhandledDependencyError:
    """Test the error value itself."""

    def test_requires_entries(self):
        """Test constructing without any dependency is rejected."""
        with pytest.raises(ValueError):
            UnhandledDependencyError([])

    def test_single_dependent(self):
        """Test message with one dependent."""
        error = UnhandledDependencyError([UnhandledDependency(id="net", dependents=["db"])])

        assert str(error) == '"net" depended by "db" is not included'
