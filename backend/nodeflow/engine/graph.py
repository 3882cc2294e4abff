"""Graph data structures for the execution engine."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Iterator, Union

from .errors import InvalidLinkError, NodeNotFoundError

if TYPE_CHECKING:
    from ..nodes.base import BaseNode

NodeId = Union[int, str]
LinkId = Union[int, str]


class NodeMode(IntEnum):
    # Numeric values match the editor's serialized graphs
    NORMAL = 0
    MUTED = 2
    BYPASSED = 4


@dataclass
class InputSlot:
    name: str
    dtype: str
    link: LinkId | None = None  # at most one incoming link


@dataclass
class OutputSlot:
    name: str
    dtype: str
    links: list[LinkId] = field(default_factory=list)


@dataclass(frozen=True)
class Link:
    id: LinkId
    origin_id: NodeId
    origin_slot: int  # index into origin.outputs
    target_id: NodeId
    target_slot: int  # index into target.inputs


@dataclass
class Graph:
    """Node set plus link set. Node insertion order is the graph's own ordering."""

    nodes: dict[NodeId, BaseNode] = field(default_factory=dict)
    links: dict[LinkId, Link] = field(default_factory=dict)
    _link_ids: Iterator[int] = field(default_factory=lambda: itertools.count(1), repr=False)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[BaseNode]:
        return iter(self.nodes.values())

    def get_node_by_id(self, node_id: NodeId) -> BaseNode | None:
        return self.nodes.get(node_id)

    def add(self, node: BaseNode) -> BaseNode:
        if node.id in self.nodes:
            raise ValueError(f"Duplicate node id: {node.id}")
        self.nodes[node.id] = node
        return node

    def remove(self, node_id: NodeId) -> None:
        node = self.nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        for link in self.get_incoming_links(node_id) + self.get_outgoing_links(node_id):
            self.disconnect(link.id)
        del self.nodes[node_id]

    def connect(
        self,
        origin_id: NodeId,
        origin_slot: int,
        target_id: NodeId,
        target_slot: int,
    ) -> Link:
        """Bind origin's output slot to target's input slot, replacing any existing binding."""
        link_id = next(self._link_ids)
        while link_id in self.links:
            link_id = next(self._link_ids)
        return self.add_link(Link(link_id, origin_id, origin_slot, target_id, target_slot))

    def add_link(self, link: Link) -> Link:
        origin = self.nodes.get(link.origin_id)
        target = self.nodes.get(link.target_id)
        if origin is None or target is None:
            missing = link.origin_id if origin is None else link.target_id
            raise InvalidLinkError(
                f"Link {link.id} references missing node {missing}",
                details={"link_id": link.id, "node_id": missing},
            )
        if not 0 <= link.origin_slot < len(origin.outputs):
            raise InvalidLinkError(
                f"Link {link.id}: output slot {link.origin_slot} out of range for node {origin.id}",
                details={"link_id": link.id},
            )
        if not 0 <= link.target_slot < len(target.inputs):
            raise InvalidLinkError(
                f"Link {link.id}: input slot {link.target_slot} out of range for node {target.id}",
                details={"link_id": link.id},
            )
        if link.id in self.links:
            raise InvalidLinkError(f"Duplicate link id: {link.id}", details={"link_id": link.id})

        slot = target.inputs[link.target_slot]
        if slot.link is not None:
            self.disconnect(slot.link)

        self.links[link.id] = link
        slot.link = link.id
        origin.outputs[link.origin_slot].links.append(link.id)
        return link

    def disconnect(self, link_id: LinkId) -> None:
        link = self.links.pop(link_id, None)
        if link is None:
            return
        target = self.nodes.get(link.target_id)
        if target is not None and link.target_slot < len(target.inputs):
            slot = target.inputs[link.target_slot]
            if slot.link == link_id:
                slot.link = None
        origin = self.nodes.get(link.origin_id)
        if origin is not None and link.origin_slot < len(origin.outputs):
            out = origin.outputs[link.origin_slot]
            out.links = [lid for lid in out.links if lid != link_id]

    def get_incoming_links(self, node_id: NodeId) -> list[Link]:
        node = self.nodes.get(node_id)
        if node is None:
            return []
        return [self.links[s.link] for s in node.inputs if s.link in self.links]

    def get_outgoing_links(self, node_id: NodeId) -> list[Link]:
        return [link for link in self.links.values() if link.origin_id == node_id]

    def get_predecessors(self, node_id: NodeId) -> set[NodeId]:
        return {link.origin_id for link in self.get_incoming_links(node_id)}

    def get_successors(self, node_id: NodeId) -> set[NodeId]:
        return {link.target_id for link in self.get_outgoing_links(node_id)}
