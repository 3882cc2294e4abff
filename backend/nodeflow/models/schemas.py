"""Pydantic schemas for API request/response models."""
from typing import Any

from pydantic import BaseModel


class SlotSchema(BaseModel):
    name: str
    type: str = "any"


class NodeSchema(BaseModel):
    id: int | str
    node_type: str
    mode: int = 0
    params: dict[str, Any] = {}
    position: dict[str, float] = {}
    # Slots beyond the node type's declared ones (added in the editor)
    extra_inputs: list[SlotSchema] = []
    extra_outputs: list[SlotSchema] = []


class LinkSchema(BaseModel):
    id: int | str
    origin_id: int | str
    origin_slot: int = 0
    target_id: int | str
    target_slot: int = 0


class GraphSchema(BaseModel):
    nodes: list[NodeSchema]
    links: list[LinkSchema] = []
    name: str = ""
    description: str = ""


class ExecuteRequest(BaseModel):
    graph: GraphSchema
    validate_first: bool = False


class ExecuteResponse(BaseModel):
    execution_id: str
    session_id: str
    status: str


class ValidateResponse(BaseModel):
    valid: bool
    errors: list[str] = []
