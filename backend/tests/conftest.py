"""Shared test fixtures for nodeflow backend tests."""
import inspect
import sys
from pathlib import Path

import pytest

# Ensure app package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from nodeflow.engine.graph import Graph, NodeMode
from nodeflow.engine.runner import ExecutionEngine
from nodeflow.nodes.base import BaseNode


@pytest.fixture(scope="session", autouse=True)
def register_nodes():
    """Discover and register all node types once per test session."""
    from nodeflow.nodes.registry import NodeRegistry
    NodeRegistry.discover("nodeflow.nodes")


class ScriptedNode(BaseNode):
    """Node with editor-style slots whose behaviour is a plain callable.

    Every call to execute is recorded with the keyword arguments it received.
    """

    def __init__(self, node_id, inputs=(), outputs=(), fn=None, mode=NodeMode.NORMAL, params=None):
        super().__init__(node_id, node_type="Scripted", mode=mode, params=params)
        for name, dtype in inputs:
            self.add_input(name, dtype)
        for name, dtype in outputs:
            self.add_output(name, dtype)
        self.fn = fn
        self.calls: list[dict] = []

    @classmethod
    def INPUT_TYPES(cls):
        return {}

    @classmethod
    def RETURN_TYPES(cls):
        return []

    async def execute(self, **kwargs):
        self.calls.append(dict(kwargs))
        if self.fn is None:
            return {}
        result = self.fn(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


@pytest.fixture
def make_node():
    return ScriptedNode


@pytest.fixture
def engine():
    return ExecutionEngine(cycle_policy="error", error_policy="continue")


@pytest.fixture
def chain():
    """a -> b -> c, each adding one to its input."""
    a = ScriptedNode("a", outputs=[("out", "number")], fn=lambda **kw: {"out": 1})
    b = ScriptedNode(
        "b", inputs=[("in", "number")], outputs=[("out", "number")],
        fn=lambda **kw: {"out": (kw.get("in") or 0) + 1},
    )
    c = ScriptedNode(
        "c", inputs=[("in", "number")], outputs=[("out", "number")],
        fn=lambda **kw: {"out": (kw.get("in") or 0) + 1},
    )
    graph = Graph()
    for node in (a, b, c):
        graph.add(node)
    graph.connect("a", 0, "b", 0)
    graph.connect("b", 0, "c", 0)
    return graph
