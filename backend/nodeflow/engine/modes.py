"""Node modes: run normally, mute to nulls, or bypass inputs to outputs."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .graph import NodeMode

if TYPE_CHECKING:
    from ..nodes.base import BaseNode


def muted_outputs(node: BaseNode) -> dict[str, Any]:
    """Every declared output set to None."""
    return {slot.name: None for slot in node.outputs}


def bypass_outputs(node: BaseNode, inputs: dict[str, Any]) -> dict[str, Any]:
    """Pass inputs straight through to outputs.

    Each output takes the first input of the same type that resolved to a
    value (None included), falling back to the input at the same position.
    Outputs with neither are omitted.
    """
    outputs: dict[str, Any] = {}
    for index, out in enumerate(node.outputs):
        match = next(
            (s.name for s in node.inputs if s.dtype == out.dtype and s.name in inputs),
            None,
        )
        if match is None and index < len(node.inputs):
            match = node.inputs[index].name
        if match is not None and match in inputs:
            outputs[out.name] = inputs[match]
    return outputs


def simulate_outputs(node: BaseNode, inputs: dict[str, Any]) -> dict[str, Any]:
    """Outputs for a node that is not run, according to its mode."""
    if node.mode == NodeMode.MUTED:
        return muted_outputs(node)
    if node.mode == NodeMode.BYPASSED:
        return bypass_outputs(node, inputs)
    raise ValueError(f"Node {node.id} runs normally and has no simulated outputs")

