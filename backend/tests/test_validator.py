"""Tests for graph validation: cycles, links, type checking, required inputs."""
import pytest

from nodeflow.engine.errors import GraphValidationError
from nodeflow.engine.graph import Graph, Link
from nodeflow.engine.validator import ensure_valid, validate_graph
from nodeflow.nodes.registry import NodeRegistry


def _text_pipeline():
    graph = Graph()
    graph.add(NodeRegistry.create("Text", 1, params={"text": "hello world"}))
    graph.add(NodeRegistry.create("TextReplace", 2, params={"find": "world", "replace": "there"}))
    graph.add(NodeRegistry.create("Preview", 3))
    graph.connect(1, 0, 2, 0)
    graph.connect(2, 0, 3, 0)
    return graph


class TestCycleDetection:
    def test_no_cycle(self):
        errors = validate_graph(_text_pipeline())
        assert not any("cycle" in e.lower() for e in errors)

    def test_self_loop(self, make_node):
        graph = Graph()
        graph.add(make_node("a", inputs=[("in", "any")], outputs=[("out", "any")]))
        graph.connect("a", 0, "a", 0)
        errors = validate_graph(graph)
        assert any("cycle" in e.lower() for e in errors)

    def test_two_node_cycle(self, make_node):
        graph = Graph()
        for nid in ("a", "b"):
            graph.add(make_node(nid, inputs=[("in", "any")], outputs=[("out", "any")]))
        graph.connect("a", 0, "b", 0)
        graph.connect("b", 0, "a", 0)
        errors = validate_graph(graph)
        assert errors == ["Graph contains a cycle (nodes a, b unreachable)"]


class TestLinks:
    def test_valid_pipeline(self):
        assert validate_graph(_text_pipeline()) == []

    def test_number_feeds_string(self):
        graph = Graph()
        graph.add(NodeRegistry.create("Number", "n", params={"value": 3}))
        graph.add(NodeRegistry.create("CombineText", "c"))
        graph.connect("n", 0, "c", 0)
        assert validate_graph(graph) == []

    def test_type_mismatch(self, make_node):
        graph = Graph()
        graph.add(NodeRegistry.create("Text", "t"))
        graph.add(make_node("num", inputs=[("n", "number")]))
        graph.connect("t", 0, "num", 0)
        errors = validate_graph(graph)
        assert len(errors) == 1
        assert "type mismatch" in errors[0]

    def test_any_matches_everything(self, make_node):
        graph = Graph()
        graph.add(NodeRegistry.create("Boolean", "b"))
        graph.add(NodeRegistry.create("Delay", "d"))
        graph.add(make_node("img", inputs=[("i", "image")]))
        graph.connect("b", 0, "d", 0)
        graph.connect("d", 0, "img", 0)
        assert validate_graph(graph) == []

    def test_custom_types_match_only_themselves(self, make_node):
        graph = Graph()
        graph.add(make_node("a", outputs=[("o", "LATENT")]))
        graph.add(make_node("b", inputs=[("i", "LATENT"), ("j", "MASK")]))
        graph.connect("a", 0, "b", 0)
        graph.connect("a", 0, "b", 1)
        errors = validate_graph(graph)
        assert errors == ["Link 2: type mismatch LATENT → MASK"]

    def test_link_to_missing_node(self):
        graph = _text_pipeline()
        graph.links[99] = Link(99, "ghost", 0, 3, 0)
        errors = validate_graph(graph)
        assert "Link 99 references missing node" in errors

    def test_slot_out_of_range(self):
        graph = _text_pipeline()
        graph.links[99] = Link(99, 1, 4, 3, 0)
        errors = validate_graph(graph)
        assert any("output slot 4 out of range" in e for e in errors)


class TestRequiredInputs:
    def test_required_input_not_connected(self):
        graph = Graph()
        graph.add(NodeRegistry.create("TextReplace", "r"))
        errors = validate_graph(graph)
        assert errors == ["Node 'r' (TextReplace): required input 'text' not connected"]

    def test_property_stands_in_for_connection(self):
        graph = Graph()
        graph.add(NodeRegistry.create("TextReplace", "r", params={"text": "abc"}))
        assert validate_graph(graph) == []

    def test_optional_inputs_may_stay_open(self):
        graph = Graph()
        graph.add(NodeRegistry.create("CombineText", "c"))
        assert validate_graph(graph) == []


class TestEnsureValid:
    def test_raises_with_all_errors(self):
        graph = Graph()
        graph.add(NodeRegistry.create("TextReplace", "r1"))
        graph.add(NodeRegistry.create("TextReplace", "r2"))
        with pytest.raises(GraphValidationError) as exc:
            ensure_valid(graph)
        assert len(exc.value.errors) == 2

    def test_passes_silently(self):
        ensure_valid(_text_pipeline())
