"""Result cache for node outputs, shared across passes of one engine."""
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from .graph import NodeId


class ResultCache:
    """Caches the last mode-adjusted outputs of each node, keyed by node id.

    Entries are frozen on write and replaced wholesale, so readers never see
    a partially updated mapping.
    """

    def __init__(self):
        self._cache: dict[NodeId, Mapping[str, Any]] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self._cache)

    def get(self, node_id: NodeId) -> Mapping[str, Any] | None:
        return self._cache.get(node_id)

    def put(self, node_id: NodeId, outputs: Mapping[str, Any]) -> Mapping[str, Any]:
        entry = MappingProxyType(dict(outputs))
        self._cache[node_id] = entry
        return entry

    def snapshot(self) -> Mapping[NodeId, Mapping[str, Any]]:
        """Read-only copy of the current entries."""
        return MappingProxyType(dict(self._cache))

    def clear(self):
        self._cache.clear()
