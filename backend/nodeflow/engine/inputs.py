"""Resolve a node's input values from cached upstream outputs."""
from __future__ import annotations

from typing import TYPE_CHECKING, AbstractSet, Any

from .cache import ResultCache
from .graph import Graph, NodeId

if TYPE_CHECKING:
    from ..nodes.base import BaseNode


def resolve_inputs(
    node: BaseNode,
    graph: Graph,
    cache: ResultCache,
    exclude: AbstractSet[NodeId] = frozenset(),
) -> dict[str, Any]:
    """Map input-slot name to the upstream value, for every slot that has one.

    Unbound slots, and slots whose origin has no cache entry or never produced
    the linked output, are absent from the result. Origins in `exclude` are
    treated as having no cache entry.
    """
    inputs: dict[str, Any] = {}
    for slot in node.inputs:
        if slot.link is None:
            continue
        link = graph.links.get(slot.link)
        if link is None:
            continue

        if link.origin_id in exclude:
            continue
        cached = cache.get(link.origin_id)
        if cached is None:
            continue
        origin = graph.get_node_by_id(link.origin_id)
        if origin is None or link.origin_slot >= len(origin.outputs):
            continue

        output_name = origin.outputs[link.origin_slot].name
        if output_name in cached:
            inputs[slot.name] = cached[output_name]
    return inputs
