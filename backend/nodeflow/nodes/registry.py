"""Node registry: node type name -> BaseNode subclass, filled by auto-discovery."""
import importlib
import logging
import pkgutil
from typing import Any

from ..engine.errors import UnknownNodeTypeError
from ..engine.graph import NodeId, NodeMode
from .base import BaseNode, NodeDefinition

logger = logging.getLogger(__name__)


class NodeRegistry:
    """Class-level registry shared by the whole process.

    Node modules register themselves at import time:

        @NodeRegistry.register("CombineText")
        class CombineTextNode(BaseNode):
            ...

    Without a name the class name is used. Registering a name twice replaces
    the earlier class.
    """

    _nodes: dict[str, type[BaseNode]] = {}

    @classmethod
    def register(cls, node_type: str | None = None):
        def decorator(node_cls: type[BaseNode]) -> type[BaseNode]:
            if not (isinstance(node_cls, type) and issubclass(node_cls, BaseNode)):
                raise TypeError(f"{node_cls!r} is not a BaseNode subclass")
            name = node_type or node_cls.__name__
            previous = cls._nodes.get(name)
            if previous is not None and previous is not node_cls:
                logger.warning(
                    "Node type %s re-registered: %s replaces %s",
                    name, node_cls.__qualname__, previous.__qualname__,
                )
            cls._nodes[name] = node_cls
            return node_cls
        return decorator

    @classmethod
    def unregister(cls, node_type: str) -> None:
        cls._nodes.pop(node_type, None)

    @classmethod
    def get(cls, node_type: str) -> type[BaseNode]:
        try:
            return cls._nodes[node_type]
        except KeyError:
            raise UnknownNodeTypeError(node_type) from None

    @classmethod
    def create(
        cls,
        node_type: str,
        node_id: NodeId,
        mode: NodeMode | int = NodeMode.NORMAL,
        params: dict[str, Any] | None = None,
    ) -> BaseNode:
        """Instantiate a registered node for use in a graph."""
        return cls.get(node_type)(node_id, node_type=node_type, mode=mode, params=params)

    @classmethod
    def all_definitions(cls) -> dict[str, NodeDefinition]:
        return {
            name: node_cls.get_definition(name)
            for name, node_cls in cls._nodes.items()
        }

    @classmethod
    def discover(cls, package_name: str) -> list[str]:
        """Import every public module of a package so its nodes register.

        Returns the imported module names. A missing package is logged and
        skipped; a module that fails to import raises.
        """
        try:
            package = importlib.import_module(package_name)
        except ImportError:
            logger.warning("Node package %s not found", package_name)
            return []
        if not hasattr(package, "__path__"):
            return []

        imported = []
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            if module_name.startswith("_") or module_name in ("base", "registry"):
                continue
            importlib.import_module(f"{package_name}.{module_name}")
            imported.append(module_name)
        logger.debug(
            "Discovered %d node types from %s", len(cls._nodes), package_name,
        )
        return imported
