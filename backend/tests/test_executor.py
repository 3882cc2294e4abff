"""Tests for dependency resolution: topological sort and downstream closure."""
import pytest

from nodeflow.engine.errors import CycleError
from nodeflow.engine.executor import downstream_closure, resolve_order, topological_sort
from nodeflow.engine.graph import Graph, Link, NodeMode


def _graph(make_node, ids, links=()):
    graph = Graph()
    for nid in ids:
        graph.add(make_node(nid, inputs=[("in", "any"), ("in2", "any")], outputs=[("out", "any")]))
    for origin, target, slot in links:
        graph.connect(origin, 0, target, slot)
    return graph


class TestTopologicalSort:
    def test_simple_chain(self, chain):
        order = topological_sort(chain)
        assert order == ["a", "b", "c"]

    def test_single_node(self, make_node):
        graph = _graph(make_node, ["n1"])
        assert topological_sort(graph) == ["n1"]

    def test_empty_graph(self):
        assert topological_sort(Graph()) == []

    def test_ties_keep_insertion_order(self, make_node):
        graph = _graph(make_node, ["c", "a", "b"])
        assert topological_sort(graph) == ["c", "a", "b"]

    def test_dependency_inserted_after_dependent(self, make_node):
        graph = _graph(make_node, ["late", "early"], links=[("early", "late", 0)])
        assert topological_sort(graph) == ["early", "late"]

    def test_diamond_graph(self, make_node):
        """A -> B, A -> C, B -> D, C -> D"""
        graph = _graph(
            make_node, ["a", "b", "c", "d"],
            links=[("a", "b", 0), ("a", "c", 0), ("b", "d", 0), ("c", "d", 1)],
        )
        order = topological_sort(graph)
        assert order.index("a") < order.index("b")
        assert order.index("a") < order.index("c")
        assert order.index("b") < order.index("d")
        assert order.index("c") < order.index("d")

    def test_no_node_precedes_its_dependencies(self, make_node):
        ids = [f"n{i}" for i in range(8)]
        links = [("n7", "n0", 0), ("n0", "n3", 0), ("n5", "n3", 1), ("n3", "n1", 0), ("n7", "n6", 0)]
        graph = _graph(make_node, ids, links=links)
        order = topological_sort(graph)
        assert sorted(order) == sorted(ids)
        for nid in ids:
            for dep in graph.get_predecessors(nid):
                assert order.index(dep) < order.index(nid)

    def test_integer_ids(self, make_node):
        graph = _graph(make_node, [3, 1, 2], links=[(1, 3, 0)])
        assert topological_sort(graph) == [1, 2, 3]

    def test_cycle_raises(self, make_node):
        graph = _graph(make_node, ["a", "b"], links=[("a", "b", 0), ("b", "a", 0)])
        with pytest.raises(CycleError, match="unreachable") as exc:
            topological_sort(graph)
        assert exc.value.node_ids == ["a", "b"]

    def test_cycle_excludes_downstream_nodes(self, make_node):
        graph = _graph(
            make_node, ["free", "a", "b", "after"],
            links=[("a", "b", 0), ("b", "a", 0), ("b", "after", 0)],
        )
        order = resolve_order(graph)
        assert order.ids == ["free"]
        assert order.unreachable == ["a", "b", "after"]

    def test_self_loop(self, make_node):
        graph = _graph(make_node, ["a"], links=[("a", "a", 0)])
        assert resolve_order(graph).unreachable == ["a"]

    def test_dangling_origin_adds_no_dependency(self, make_node):
        graph = _graph(make_node, ["a"])
        graph.links[99] = Link(99, "ghost", 0, "a", 0)
        graph.nodes["a"].inputs[0].link = 99
        assert topological_sort(graph) == ["a"]

    def test_muted_nodes_in_topo_order(self, chain):
        """Mode never changes ordering."""
        chain.nodes["b"].mode = NodeMode.MUTED
        assert topological_sort(chain) == ["a", "b", "c"]


class TestDownstreamClosure:
    def test_from_middle_of_chain(self, chain):
        order = resolve_order(chain)
        assert [n.id for n in downstream_closure(chain, order, "b")] == ["b", "c"]

    def test_from_root_covers_everything_reachable(self, chain):
        order = resolve_order(chain)
        assert [n.id for n in downstream_closure(chain, order, "a")] == ["a", "b", "c"]

    def test_sibling_branch_excluded(self, make_node):
        graph = _graph(
            make_node, ["a", "b", "c", "d"],
            links=[("a", "b", 0), ("a", "c", 0), ("c", "d", 0)],
        )
        order = resolve_order(graph)
        assert [n.id for n in downstream_closure(graph, order, "b")] == ["b"]
        assert [n.id for n in downstream_closure(graph, order, "c")] == ["c", "d"]

    def test_unrelated_later_nodes_excluded(self, make_node):
        graph = _graph(make_node, ["a", "b", "x"], links=[("a", "b", 0)])
        order = resolve_order(graph)
        assert [n.id for n in downstream_closure(graph, order, "a")] == ["a", "b"]

    def test_missing_start(self, chain):
        assert downstream_closure(chain, resolve_order(chain), "nope") == []
