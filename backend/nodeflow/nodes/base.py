"""Base node abstraction and data type definitions."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..engine.graph import InputSlot, NodeId, NodeMode, OutputSlot


class DataType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    IMAGE = "image"
    ANY = "any"


# Which types can connect to which
TYPE_COMPATIBILITY: dict[DataType, set[DataType]] = {
    dt: {dt, DataType.ANY} for dt in DataType
}
TYPE_COMPATIBILITY[DataType.ANY] = set(DataType)
TYPE_COMPATIBILITY[DataType.NUMBER].add(DataType.STRING)
TYPE_COMPATIBILITY[DataType.BOOLEAN].add(DataType.STRING)


def is_compatible(source: str, target: str) -> bool:
    """Whether an output of type `source` may feed an input of type `target`."""
    if source == target or DataType.ANY in (source, target):
        return True
    try:
        return DataType(target) in TYPE_COMPATIBILITY.get(DataType(source), set())
    except ValueError:
        # Custom slot types only match themselves
        return False


@dataclass
class InputSpec:
    dtype: DataType
    default: Any = None
    required: bool = True
    min_val: float | None = None
    max_val: float | None = None
    choices: list[Any] | None = None
    is_handle: bool = True  # True = comes from a link; False = set in properties


@dataclass
class OutputSpec:
    dtype: DataType
    name: str


@dataclass
class NodeDefinition:
    """Serializable node definition sent to the frontend."""
    node_type: str
    display_name: str
    category: str
    description: str
    inputs: dict[str, InputSpec]
    outputs: list[OutputSpec]


class BaseNode(ABC):
    """Abstract base class for all nodes in the graph.

    A node owns its slot declarations and a property store. Before each
    execution the engine rebuilds the property store from declared defaults,
    the node's params, and the projected input values, in that order.
    `execute` receives the same values as keyword arguments and returns a
    mapping from output-slot name to value.
    """

    CATEGORY: str = "Uncategorized"
    DISPLAY_NAME: str = ""
    DESCRIPTION: str = ""

    def __init__(
        self,
        node_id: NodeId,
        node_type: str | None = None,
        mode: NodeMode | int = NodeMode.NORMAL,
        params: dict[str, Any] | None = None,
    ):
        self.id = node_id
        self.node_type = node_type or type(self).__name__
        self.mode = NodeMode(mode)
        self.params: dict[str, Any] = dict(params or {})
        self.inputs: list[InputSlot] = [
            InputSlot(name, spec.dtype.value)
            for name, spec in self.INPUT_TYPES().items()
            if spec.is_handle
        ]
        self.outputs: list[OutputSlot] = [
            OutputSlot(spec.name, spec.dtype.value) for spec in self.RETURN_TYPES()
        ]
        self.properties: dict[str, Any] = self._base_properties()
        self._output_data: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} mode={self.mode.name}>"

    @classmethod
    @abstractmethod
    def INPUT_TYPES(cls) -> dict[str, InputSpec]:
        ...

    @classmethod
    @abstractmethod
    def RETURN_TYPES(cls) -> list[OutputSpec]:
        ...

    @abstractmethod
    async def execute(self, **kwargs: Any) -> dict[str, Any] | None:
        ...

    # Slots

    def add_input(self, name: str, dtype: str = DataType.ANY.value) -> InputSlot:
        slot = InputSlot(name, str(dtype))
        self.inputs.append(slot)
        return slot

    def add_output(self, name: str, dtype: str = DataType.ANY.value) -> OutputSlot:
        slot = OutputSlot(name, str(dtype))
        self.outputs.append(slot)
        return slot

    def find_input_slot(self, name: str) -> int:
        for i, slot in enumerate(self.inputs):
            if slot.name == name:
                return i
        return -1

    def find_output_slot(self, name: str) -> int:
        for i, slot in enumerate(self.outputs):
            if slot.name == name:
                return i
        return -1

    # Property store

    def _base_properties(self) -> dict[str, Any]:
        props = {
            name: spec.default
            for name, spec in self.INPUT_TYPES().items()
            if spec.default is not None
        }
        props.update(self.params)
        return props

    def set_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def get_input_data(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def set_output_data(self, name: str, value: Any) -> None:
        self._output_data[name] = value

    async def run(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """Apply projected inputs to the property store and execute."""
        self.properties = self._base_properties()
        for name, value in inputs.items():
            self.set_property(name, value)
        self._output_data = {}

        result = await self.execute(**self.properties)

        outputs = dict(self._output_data)
        if result:
            outputs.update(result)
        return outputs

    @classmethod
    def get_definition(cls, node_type: str) -> NodeDefinition:
        return NodeDefinition(
            node_type=node_type,
            display_name=cls.DISPLAY_NAME or cls.__name__,
            category=cls.CATEGORY,
            description=cls.DESCRIPTION or cls.__doc__ or "",
            inputs=cls.INPUT_TYPES(),
            outputs=cls.RETURN_TYPES(),
        )
