"""Exceptions raised by the execution engine."""
from typing import Any


class EngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NodeNotFoundError(EngineError):
    """Raised when a requested node id is not in the graph."""

    def __init__(self, node_id: Any) -> None:
        super().__init__(
            message=f"Node {node_id} not found in graph",
            details={"node_id": node_id},
        )
        self.node_id = node_id


class CycleError(EngineError):
    """Raised when part of the graph can never be ordered."""

    def __init__(self, node_ids: list[Any]) -> None:
        ids = ", ".join(str(nid) for nid in node_ids)
        super().__init__(
            message=f"Cycle detected, nodes {{{ids}}} unreachable",
            details={"node_ids": list(node_ids)},
        )
        self.node_ids = list(node_ids)


class InvalidLinkError(EngineError):
    """Raised when a link references a missing node or slot."""


class UnknownNodeTypeError(EngineError, KeyError):
    def __init__(self, node_type: str) -> None:
        super().__init__(
            message=f"Unknown node type: {node_type}",
            details={"node_type": node_type},
        )
        self.node_type = node_type


class GraphValidationError(EngineError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            message=f"Graph validation failed: {errors}",
            details={"errors": errors},
        )
        self.errors = errors
