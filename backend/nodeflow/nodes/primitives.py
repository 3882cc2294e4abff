"""Primitive value nodes: constants set from the properties panel."""
import random

from .base import BaseNode, DataType, InputSpec, OutputSpec
from .registry import NodeRegistry

MAX_SEED = 2147483647


@NodeRegistry.register("Number")
class NumberNode(BaseNode):
    CATEGORY = "Input"
    DISPLAY_NAME = "Number"
    DESCRIPTION = "Numeric constant"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "value": InputSpec(dtype=DataType.NUMBER, default=0, is_handle=False),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.NUMBER, name="value")]

    async def execute(self, **kwargs) -> dict:
        return {"value": kwargs.get("value", 0)}


@NodeRegistry.register("Text")
class TextNode(BaseNode):
    CATEGORY = "Input"
    DISPLAY_NAME = "Text"
    DESCRIPTION = "Text constant, e.g. a prompt"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "text": InputSpec(dtype=DataType.STRING, default="", is_handle=False),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.STRING, name="text")]

    async def execute(self, **kwargs) -> dict:
        return {"text": kwargs.get("text", "")}


@NodeRegistry.register("Boolean")
class BooleanNode(BaseNode):
    CATEGORY = "Input"
    DISPLAY_NAME = "Boolean"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "value": InputSpec(dtype=DataType.BOOLEAN, default=False, is_handle=False),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.BOOLEAN, name="value")]

    async def execute(self, **kwargs) -> dict:
        return {"value": bool(kwargs.get("value", False))}


@NodeRegistry.register("Seed")
class SeedNode(BaseNode):
    CATEGORY = "Input"
    DISPLAY_NAME = "Seed"
    DESCRIPTION = "Random seed, re-rolled on every run unless locked"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "seed": InputSpec(
                dtype=DataType.NUMBER, default=0, min_val=0, max_val=MAX_SEED,
                is_handle=False,
            ),
            "locked": InputSpec(dtype=DataType.BOOLEAN, default=False, is_handle=False),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.NUMBER, name="seed")]

    async def execute(self, **kwargs) -> dict:
        seed = kwargs.get("seed", 0)
        if not kwargs.get("locked", False):
            seed = random.randint(0, MAX_SEED)
            # Keep the rolled value so the editor can show and lock it
            self.params["seed"] = seed
        return {"seed": seed}
