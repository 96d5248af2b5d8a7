"""
Test cases for start-node selection and reachability traversal
"""

import re

import pytest

from plcallgraph.graph.analyzer import ReachabilityAnalyzer
from plcallgraph.graph.models import CallGraph, TraversalResult


def make_graph(*edges):
    graph = CallGraph()
    for caller, callee in edges:
        graph.add_edge(f"x.pl:{caller}", f"x.pl:{callee}")
    return graph


def short(nodes):
    return {node.split(':', 1)[1] for node in nodes}


def short_edges(edges):
    return {(a.split(':', 1)[1], b.split(':', 1)[1]) for a, b in edges}


class TestStartNodeSelection:
    """Test how traversal origins are chosen"""

    def test_default_start_nodes_have_no_caller(self):
        """Test that root functions are selected, sorted"""
        graph = make_graph(("zeta", "a"), ("main", "a"), ("a", "b"), ("p", "q"), ("q", "p"))
        analyzer = ReachabilityAnalyzer(graph)

        assert analyzer.select_start_nodes() == ["x.pl:main", "x.pl:zeta"]

    def test_pattern_selects_matching_nodes(self):
        """Test that the pattern is searched in the qualified identifier"""
        graph = make_graph(("main", "dump"), ("dump", "dump_all"), ("main", "load"))
        analyzer = ReachabilityAnalyzer(graph)

        assert analyzer.select_start_nodes(re.compile("dump")) == ["x.pl:dump", "x.pl:dump_all"]
        assert analyzer.select_start_nodes(re.compile(r"\bdump\b")) == ["x.pl:dump"]
        assert analyzer.select_start_nodes(re.compile("^x\\.pl:")) == [
            "x.pl:dump", "x.pl:dump_all", "x.pl:load", "x.pl:main"
        ]


class TestTraversal:
    """Test the bidirectional reachability walk"""

    def test_main_downward_closure(self):
        """Test that main reaches its callees and unrelated cycles are left out"""
        graph = make_graph(("main", "a"), ("a", "b"), ("b", "c"), ("p", "q"), ("q", "p"))
        result = ReachabilityAnalyzer(graph).analyze()

        assert result.start_nodes == ["x.pl:main"]
        assert short(result.visited) == {"main", "a", "b", "c"}
        assert short_edges(result.edges) == {("main", "a"), ("a", "b"), ("b", "c")}

    def test_start_node_expands_both_ways(self):
        """Test callers and callees of a pattern-selected node"""
        graph = make_graph(("main", "a"), ("a", "b"), ("a", "d"), ("b", "c"))
        result = ReachabilityAnalyzer(graph).analyze(pattern=re.compile(r":b$"))

        assert result.start_nodes == ["x.pl:b"]
        assert short(result.visited) == {"main", "a", "b", "c"}
        assert short_edges(result.edges) == {("main", "a"), ("a", "b"), ("b", "c")}

    def test_upward_walk_does_not_turn_downward(self):
        """Test that callees of callers are not pulled in"""
        graph = make_graph(("a", "b"), ("a", "sibling"), ("sibling", "deep"))
        result = ReachabilityAnalyzer(graph).analyze(start_nodes=["x.pl:b"])

        assert "x.pl:sibling" not in result.visited
        assert "x.pl:deep" not in result.visited

    def test_mutual_recursion_terminates(self):
        """Test a two-node cycle"""
        graph = make_graph(("a", "b"), ("b", "a"))
        result = ReachabilityAnalyzer(graph).analyze(start_nodes=["x.pl:a"])

        assert short(result.visited) == {"a", "b"}
        assert short_edges(result.edges) == {("a", "b"), ("b", "a")}

    def test_self_recursion_terminates(self):
        """Test a function calling itself"""
        graph = make_graph(("main", "fact"), ("fact", "fact"))
        result = ReachabilityAnalyzer(graph).analyze()

        assert short(result.visited) == {"main", "fact"}
        assert short_edges(result.edges) == {("main", "fact"), ("fact", "fact")}

    def test_visited_set_shared_between_start_nodes(self):
        """Test that a node reached from one start is not expanded again"""
        graph = make_graph(("r1", "c"), ("r2", "c"), ("c", "d"))
        result = ReachabilityAnalyzer(graph).analyze()

        assert result.start_nodes == ["x.pl:r1", "x.pl:r2"]
        assert short(result.visited) == {"r1", "r2", "c", "d"}
        assert short_edges(result.edges) == {("r1", "c"), ("r2", "c"), ("c", "d")}

    def test_reached_start_node_still_fans_out(self):
        """Test that a start node reached by an earlier start keeps its tag and callers"""
        graph = make_graph(("main", "dump"), ("dump", "dump_all"), ("other", "dump_all"),
                           ("dump_all", "emit"), ("emit", "flush"))
        result = ReachabilityAnalyzer(graph).analyze(pattern=re.compile("dump"))

        assert result.start_nodes == ["x.pl:dump", "x.pl:dump_all"]
        assert result.is_start("x.pl:dump_all")
        assert short(result.visited) == {"main", "dump", "dump_all", "other", "emit", "flush"}
        assert ("other", "dump_all") in short_edges(result.edges)
        assert short_edges(result.edges) == {
            ("main", "dump"), ("dump", "dump_all"), ("other", "dump_all"),
            ("dump_all", "emit"), ("emit", "flush"),
        }

    def test_cross_file_start_nodes(self):
        """Test two matches where one calls the other from another file's caller"""
        graph = CallGraph()
        graph.add_edge("a.pl:foo", "a.pl:zed")
        graph.add_edge("b.pl:baz", "a.pl:zed")
        result = ReachabilityAnalyzer(graph).analyze(pattern=re.compile("foo|zed"))

        assert result.start_nodes == ["a.pl:foo", "a.pl:zed"]
        assert result.visited == {"a.pl:foo", "a.pl:zed", "b.pl:baz"}
        assert result.edges == {("a.pl:foo", "a.pl:zed"), ("b.pl:baz", "a.pl:zed")}

    def test_start_nodes_tagged_once(self):
        """Test that a repeated start node is listed once"""
        graph = make_graph(("a", "b"))
        result = ReachabilityAnalyzer(graph).analyze(start_nodes=["x.pl:a", "x.pl:a"])

        assert result.start_nodes == ["x.pl:a"]

    def test_each_node_expanded_once(self):
        """Test that a diamond records every edge without repeats"""
        graph = make_graph(("main", "l"), ("main", "r"), ("l", "j"), ("r", "j"), ("j", "main"))
        result = ReachabilityAnalyzer(graph).analyze(start_nodes=["x.pl:main"])

        assert short(result.visited) == {"main", "l", "r", "j"}
        assert short_edges(result.edges) == {
            ("main", "l"), ("main", "r"), ("l", "j"), ("r", "j"), ("j", "main")
        }

    def test_start_lookup_on_constructed_result(self):
        """Test start-node membership for a result built from a list"""
        result = TraversalResult(start_nodes=["x.pl:a", "x.pl:b"])
        result.add_start("x.pl:b")

        assert result.is_start("x.pl:b")
        assert not result.is_start("x.pl:c")
        assert result.start_nodes == ["x.pl:a", "x.pl:b"]

    def test_deep_chain(self):
        """Test a call chain far deeper than the recursion limit"""
        graph = CallGraph()
        for i in range(5000):
            graph.add_edge(f"x.pl:n{i:05d}", f"x.pl:n{i + 1:05d}")
        result = ReachabilityAnalyzer(graph).analyze()

        assert result.start_nodes == ["x.pl:n00000"]
        assert len(result.visited) == 5001
        assert len(result.edges) == 5000

    def test_traversal_is_deterministic(self):
        """Test that repeated runs give identical results"""
        graph = make_graph(("main", "a"), ("a", "b"), ("b", "a"), ("main", "c"))
        first = ReachabilityAnalyzer(graph).analyze()
        second = ReachabilityAnalyzer(graph).analyze()

        assert first == second


if __name__ == "__main__":
    pytest.main([__file__])
