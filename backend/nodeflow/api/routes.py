"""REST API routes."""
import asyncio
import logging
import uuid
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException

from ..config import settings
from ..engine.errors import EngineError, GraphValidationError
from ..engine.graph import Graph, Link, NodeId
from ..engine.runner import ExecutionEngine, ExecutionPass
from ..engine.validator import ensure_valid, validate_graph
from ..models.schemas import (
    ExecuteRequest, ExecuteResponse, GraphSchema, ValidateResponse,
)
from ..nodes.registry import NodeRegistry
from .sessions import ExecutionSession, get_or_create_session, get_session, remove_session
from .websocket import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Strong references to running passes; the event loop only keeps weak ones
_background_tasks: set[asyncio.Task] = set()


def _schema_to_graph(schema: GraphSchema) -> Graph:
    graph = Graph()
    for n in schema.nodes:
        node = NodeRegistry.create(n.node_type, n.id, mode=n.mode, params=n.params)
        for slot in n.extra_inputs:
            node.add_input(slot.name, slot.type)
        for slot in n.extra_outputs:
            node.add_output(slot.name, slot.type)
        graph.add(node)
    for e in schema.links:
        graph.add_link(Link(
            id=e.id, origin_id=e.origin_id, origin_slot=e.origin_slot,
            target_id=e.target_id, target_slot=e.target_slot,
        ))
    return graph


def _build_graph(schema: GraphSchema) -> Graph:
    try:
        return _schema_to_graph(schema)
    except (EngineError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))


def _lookup_id(graph: Graph, raw: str) -> NodeId:
    """Match a path parameter against the graph's ids, which may be ints."""
    if raw in graph:
        return raw
    try:
        as_int = int(raw)
    except ValueError:
        return raw
    return as_int if as_int in graph else raw


def _serialize(value: Any) -> Any:
    """Convert node outputs to a JSON-serializable form."""
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, Mapping):
        return {str(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return str(type(value).__name__)


async def _drive_pass(
    session_id: str, execution_id: str, engine: ExecutionEngine, execution: ExecutionPass,
):
    """Forward every event of a pass to the session's sockets."""
    await manager.send_to_session(session_id, {
        "type": "execution_start", "execution_id": execution_id,
    })
    try:
        async with asyncio.timeout(settings.run_timeout_s):
            async for event in execution:
                await manager.send_to_session(session_id, {
                    "type": "node_status",
                    "execution_id": execution_id,
                    **_serialize(event.to_dict()),
                })
    except TimeoutError:
        execution.cancel()
        logger.warning("Execution %s timed out after %ss", execution_id, settings.run_timeout_s)
        await manager.send_to_session(session_id, {
            "type": "execution_error",
            "execution_id": execution_id,
            "error": f"Timed out after {settings.run_timeout_s}s",
        })
        return
    except Exception as e:
        logger.exception("Execution %s failed", execution_id)
        await manager.send_to_session(session_id, {
            "type": "execution_error",
            "execution_id": execution_id,
            "error": str(e),
        })
        return

    if execution.cancelled:
        await manager.send_to_session(session_id, {
            "type": "execution_cancelled", "execution_id": execution_id,
        })
    else:
        await manager.send_to_session(session_id, {
            "type": "execution_complete",
            "execution_id": execution_id,
            "results": _serialize(engine.get_results()),
        })


def _start_pass(session: ExecutionSession, execution: ExecutionPass) -> ExecuteResponse:
    execution_id = str(uuid.uuid4())
    session.execution_id = execution_id
    task = asyncio.create_task(
        _drive_pass(session.session_id, execution_id, session.engine, execution)
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    session.task = task
    return ExecuteResponse(
        execution_id=execution_id, session_id=session.session_id, status="started",
    )


def _prepare(session_id: str, request: ExecuteRequest) -> tuple[ExecutionSession, Graph]:
    graph = _build_graph(request.graph)
    if request.validate_first:
        try:
            ensure_valid(graph)
        except GraphValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors)
    return get_or_create_session(session_id), graph


@router.get("/nodes")
async def list_nodes(category: str | None = None):
    """Registered node types keyed by name, optionally for one category only."""
    return {
        name: asdict(defn)
        for name, defn in NodeRegistry.all_definitions().items()
        if category is None or defn.category == category
    }


@router.post("/validate", response_model=ValidateResponse)
async def validate(graph: GraphSchema):
    try:
        built = _schema_to_graph(graph)
    except (EngineError, ValueError) as e:
        return ValidateResponse(valid=False, errors=[str(e)])
    errors = validate_graph(built)
    return ValidateResponse(valid=not errors, errors=errors)


@router.post("/sessions/{session_id}/execute", response_model=ExecuteResponse)
async def execute(session_id: str, request: ExecuteRequest):
    """Run the whole graph.

    Returns immediately with execution_id. The pass runs in the background;
    node status, completion and errors are delivered via WebSocket.
    """
    session, graph = _prepare(session_id, request)
    return _start_pass(session, session.engine.execute(graph))


@router.post("/sessions/{session_id}/execute/{node_id}", response_model=ExecuteResponse)
async def execute_from_node(session_id: str, node_id: str, request: ExecuteRequest):
    """Re-run a node and everything downstream of it, reusing cached upstream results."""
    session, graph = _prepare(session_id, request)
    return _start_pass(
        session, session.engine.execute_from_node(graph, _lookup_id(graph, node_id)),
    )


@router.post("/sessions/{session_id}/execute/{node_id}/only", response_model=ExecuteResponse)
async def execute_node_only(session_id: str, node_id: str, request: ExecuteRequest):
    session, graph = _prepare(session_id, request)
    return _start_pass(
        session, session.engine.execute_node_only(graph, _lookup_id(graph, node_id)),
    )


@router.post("/sessions/{session_id}/cancel")
async def cancel(session_id: str):
    session = get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    running = session.task is not None and not session.task.done()
    cancelled = session.engine.cancel() and running
    return {"status": "cancelled" if cancelled else "idle", "execution_id": session.execution_id}


@router.get("/sessions/{session_id}/results")
async def get_results(session_id: str):
    session = get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return _serialize(session.engine.get_results())


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    if remove_session(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted"}
