"""Graph validation: cycle detection, link checking, required inputs."""
from ..nodes.base import is_compatible
from .errors import GraphValidationError
from .executor import resolve_order
from .graph import Graph


def validate_graph(graph: Graph) -> list[str]:
    """Validate a graph, returning a list of error messages (empty = valid)."""
    errors: list[str] = []
    errors.extend(_check_cycles(graph))
    errors.extend(_check_links(graph))
    errors.extend(_check_required_inputs(graph))
    return errors


def ensure_valid(graph: Graph) -> None:
    errors = validate_graph(graph)
    if errors:
        raise GraphValidationError(errors)


def _check_cycles(graph: Graph) -> list[str]:
    unreachable = resolve_order(graph).unreachable
    if unreachable:
        ids = ", ".join(str(nid) for nid in unreachable)
        return [f"Graph contains a cycle (nodes {ids} unreachable)"]
    return []


def _check_links(graph: Graph) -> list[str]:
    errors: list[str] = []
    for link in graph.links.values():
        src_node = graph.get_node_by_id(link.origin_id)
        tgt_node = graph.get_node_by_id(link.target_id)
        if not src_node or not tgt_node:
            errors.append(f"Link {link.id} references missing node")
            continue

        if link.origin_slot >= len(src_node.outputs):
            errors.append(
                f"Link {link.id}: output slot {link.origin_slot} "
                f"out of range for {src_node.node_type}"
            )
            continue
        if link.target_slot >= len(tgt_node.inputs):
            errors.append(
                f"Link {link.id}: input slot {link.target_slot} "
                f"out of range for {tgt_node.node_type}"
            )
            continue

        src_dtype = src_node.outputs[link.origin_slot].dtype
        tgt_dtype = tgt_node.inputs[link.target_slot].dtype
        if not is_compatible(src_dtype, tgt_dtype):
            errors.append(
                f"Link {link.id}: type mismatch {src_dtype} → {tgt_dtype}"
            )

    return errors


def _check_required_inputs(graph: Graph) -> list[str]:
    errors: list[str] = []
    for node in graph:
        connected = {slot.name for slot in node.inputs if slot.link in graph.links}
        for input_name, spec in node.INPUT_TYPES().items():
            if not spec.required or not spec.is_handle:
                continue
            # A property value stands in for an unconnected input
            if input_name not in connected and input_name not in node.params:
                errors.append(
                    f"Node '{node.id}' ({node.node_type}): "
                    f"required input '{input_name}' not connected"
                )

    return errors
