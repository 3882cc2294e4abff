"""Text processing nodes."""
from .base import BaseNode, DataType, InputSpec, OutputSpec
from .registry import NodeRegistry

SEPARATORS = [", ", "\n", " ", " | ", " - "]


@NodeRegistry.register("CombineText")
class CombineTextNode(BaseNode):
    CATEGORY = "Processing"
    DISPLAY_NAME = "Combine Text"
    DESCRIPTION = "Join up to three texts with a separator, skipping blank ones"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "text_1": InputSpec(dtype=DataType.STRING, required=False),
            "text_2": InputSpec(dtype=DataType.STRING, required=False),
            "text_3": InputSpec(dtype=DataType.STRING, required=False),
            "separator": InputSpec(
                dtype=DataType.STRING, default=", ", choices=SEPARATORS,
                is_handle=False,
            ),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.STRING, name="combined")]

    async def execute(self, **kwargs) -> dict:
        parts = [kwargs.get(f"text_{i}") or "" for i in range(1, 4)]
        separator = kwargs.get("separator", ", ")
        return {"combined": separator.join(p for p in parts if p.strip())}


@NodeRegistry.register("TextReplace")
class TextReplaceNode(BaseNode):
    CATEGORY = "Processing"
    DISPLAY_NAME = "Replace Text"

    @classmethod
    def INPUT_TYPES(cls):
        return {
            "text": InputSpec(dtype=DataType.STRING, required=True),
            "find": InputSpec(dtype=DataType.STRING, default="", is_handle=False),
            "replace": InputSpec(dtype=DataType.STRING, default="", is_handle=False),
        }

    @classmethod
    def RETURN_TYPES(cls):
        return [OutputSpec(dtype=DataType.STRING, name="text")]

    async def execute(self, **kwargs) -> dict:
        text = kwargs.get("text")
        if text is None:
            raise ValueError("No text provided")
        find = kwargs.get("find", "")
        if not find:
            return {"text": text}
        return {"text": text.replace(find, kwargs.get("replace", ""))}
