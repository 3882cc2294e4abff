"""Utility nodes: timing and inspection."""
import asyncio

from .base import BaseNode, DataType, InputSpec, OutputSpec
from .registry import NodeRegistry


@NodeRegistry.register("Delay")
class DelayNode(BaseNode):
    CATEGORY = "Utility"
    DISPLAY_NAME = "Delay"
    DESCRIPTION = "Wait, then pass the input through unchanged"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "value": InputSpec(dtype=DataType.ANY, required=False),
            "seconds": InputSpec(
                dtype=DataType.NUMBER, default=1.0, min_val=0,
                is_handle=False,
            ),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.ANY, name="value")]

    async def execute(self, **kwargs) -> dict:
        await asyncio.sleep(max(0.0, float(kwargs.get("seconds", 1.0))))
        return {"value": kwargs.get("value")}


@NodeRegistry.register("Preview")
class PreviewNode(BaseNode):
    """Terminal node that keeps the last value it received."""

    CATEGORY = "Output"
    DISPLAY_NAME = "Preview"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.last_value = None

    @classmethod
    def INPUT_TYPES(cls):
        return {"value": InputSpec(dtype=DataType.ANY, required=False)}

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.ANY, name="value")]

    async def execute(self, **kwargs) -> dict:
        self.last_value = self.get_input_data("value")
        self.set_output_data("value", self.last_value)
        return {}
