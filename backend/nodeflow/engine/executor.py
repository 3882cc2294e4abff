"""Dependency resolution: topological order and downstream closure."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import CycleError
from .graph import Graph, NodeId

if TYPE_CHECKING:
    from ..nodes.base import BaseNode


@dataclass
class ExecutionOrder:
    nodes: list[BaseNode] = field(default_factory=list)
    # Nodes that never reached zero in-degree (members of, or downstream of, a cycle)
    unreachable: list[NodeId] = field(default_factory=list)

    @property
    def ids(self) -> list[NodeId]:
        return [n.id for n in self.nodes]

    def index_of(self, node_id: NodeId) -> int:
        for i, node in enumerate(self.nodes):
            if node.id == node_id:
                return i
        return -1


def resolve_order(graph: Graph) -> ExecutionOrder:
    """Kahn's algorithm over bound input slots.

    Ties between simultaneously-ready nodes keep the graph's node order.
    Links whose origin is not in the graph add no dependency.
    """
    dependencies: dict[NodeId, set[NodeId]] = {}
    dependents: dict[NodeId, list[NodeId]] = {nid: [] for nid in graph.nodes}
    for node in graph:
        deps: set[NodeId] = set()
        for slot in node.inputs:
            link = graph.links.get(slot.link) if slot.link is not None else None
            if link is None or link.origin_id not in graph.nodes:
                continue
            if link.origin_id not in deps:
                deps.add(link.origin_id)
                dependents[link.origin_id].append(node.id)
        dependencies[node.id] = deps

    in_degree = {nid: len(deps) for nid, deps in dependencies.items()}
    queue = deque(nid for nid, deg in in_degree.items() if deg == 0)
    order: list[BaseNode] = []
    while queue:
        node_id = queue.popleft()
        order.append(graph.nodes[node_id])
        for succ in dependents[node_id]:
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                queue.append(succ)

    unreachable = [nid for nid, deg in in_degree.items() if deg > 0]
    return ExecutionOrder(nodes=order, unreachable=unreachable)


def topological_sort(graph: Graph) -> list[NodeId]:
    """Node IDs in execution order; raises CycleError if any node is unreachable."""
    order = resolve_order(graph)
    if order.unreachable:
        raise CycleError(order.unreachable)
    return order.ids


def downstream_closure(graph: Graph, order: ExecutionOrder, start_id: NodeId) -> list[BaseNode]:
    """`start_id` plus every node after it fed, transitively, by a node already collected."""
    start = order.index_of(start_id)
    if start == -1:
        return []

    collected: set[NodeId] = {start_id}
    closure: list[BaseNode] = []
    for node in order.nodes[start:]:
        if node.id != start_id and not (graph.get_predecessors(node.id) & collected):
            continue
        collected.add(node.id)
        closure.append(node)
    return closure
