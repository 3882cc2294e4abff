"""Execution engine: drives passes over a graph and streams node status.

Three entry points share one scheduler loop:

    execute(graph)                      full run, cache cleared first
    execute_from_node(graph, node_id)   node_id and everything downstream
    execute_node_only(graph, node_id)   just node_id, inputs from the cache

Each returns an ExecutionPass, an async iterator of ExecutionEvent. Calling an
entry point immediately supersedes the previous pass; the superseded pass
stops at its next node boundary without raising.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping

from ..config import settings
from .cache import ResultCache
from .errors import CycleError, NodeNotFoundError
from .events import ExecutionEvent
from .executor import ExecutionOrder, downstream_closure, resolve_order
from .graph import Graph, NodeId, NodeMode
from .inputs import resolve_inputs
from .modes import simulate_outputs
from .session import CancellationToken, SessionManager

if TYPE_CHECKING:
    from ..nodes.base import BaseNode

logger = logging.getLogger(__name__)


class CyclePolicy(str, Enum):
    ERROR = "error"  # refuse to run, single error event
    SKIP = "skip"    # run the orderable part, drop the rest silently


class ErrorPolicy(str, Enum):
    CONTINUE = "continue"  # keep going; downstream sees missing inputs
    STOP = "stop"          # end the pass after the first failing node


class ExecutionPass:
    """Lazy event stream for one pass. Restartable only by calling the entry point again."""

    def __init__(self, token: CancellationToken, sessions: SessionManager, events: AsyncIterator[ExecutionEvent]):
        self.token = token
        self._sessions = sessions
        self._events = events

    def __aiter__(self) -> ExecutionPass:
        return self

    async def __anext__(self) -> ExecutionEvent:
        return await self._events.__anext__()

    async def aclose(self) -> None:
        await self._events.aclose()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def cancel(self) -> bool:
        """Cancel this pass if it is still the active one."""
        return self._sessions.cancel(self.token)

    async def collect(self) -> list[ExecutionEvent]:
        return [event async for event in self]


class ExecutionEngine:
    def __init__(
        self,
        cycle_policy: CyclePolicy | str | None = None,
        error_policy: ErrorPolicy | str | None = None,
    ):
        self.cycle_policy = CyclePolicy(cycle_policy or settings.cycle_policy)
        self.error_policy = ErrorPolicy(error_policy or settings.error_policy)
        self.sessions = SessionManager()

    @property
    def results(self) -> ResultCache:
        return self.sessions.results

    # Entry points

    def execute(self, graph: Graph) -> ExecutionPass:
        return self._start(self._run_full, graph)

    def execute_from_node(self, graph: Graph, start_id: NodeId) -> ExecutionPass:
        return self._start(self._run_from_node, graph, start_id)

    def execute_node_only(self, graph: Graph, node_id: NodeId) -> ExecutionPass:
        return self._start(self._run_node_only, graph, node_id)

    def cancel(self) -> bool:
        return self.sessions.cancel()

    def get_results(self) -> Mapping[NodeId, Mapping[str, Any]]:
        return self.results.snapshot()

    def _start(self, run, graph: Graph, *args: Any) -> ExecutionPass:
        token = self.sessions.begin()
        return ExecutionPass(token, self.sessions, run(token, graph, *args))

    # Pass bodies

    async def _run_full(self, token: CancellationToken, graph: Graph):
        if not self.sessions.is_active(token):
            return
        logger.info("Pass #%d: full run over %d nodes", token.serial, len(graph))
        self.results.clear()

        order = resolve_order(graph)
        cycle_error = self._check_cycles(token, order)
        if cycle_error is not None:
            yield cycle_error
            return

        async for event in self._schedule(token, graph, order.nodes):
            yield event

    async def _run_from_node(self, token: CancellationToken, graph: Graph, start_id: NodeId):
        if not self.sessions.is_active(token):
            return
        if start_id not in graph:
            logger.info("Pass #%d: start node %s not found", token.serial, start_id)
            yield ExecutionEvent.failed(start_id, NodeNotFoundError(start_id))
            return

        order = resolve_order(graph)
        if start_id in order.unreachable:
            yield ExecutionEvent.failed(start_id, CycleError(order.unreachable))
            return
        cycle_error = self._check_cycles(token, order)
        if cycle_error is not None:
            yield cycle_error
            return

        nodes = downstream_closure(graph, order, start_id)
        logger.info(
            "Pass #%d: re-running %d of %d nodes from %s",
            token.serial, len(nodes), len(graph), start_id,
        )
        # Entries from earlier passes for re-run nodes are stale until rewritten
        stale = {node.id for node in nodes}
        async for event in self._schedule(token, graph, nodes, stale):
            yield event

    async def _run_node_only(self, token: CancellationToken, graph: Graph, node_id: NodeId):
        if not self.sessions.is_active(token):
            return
        node = graph.get_node_by_id(node_id)
        if node is None:
            logger.info("Pass #%d: node %s not found", token.serial, node_id)
            yield ExecutionEvent.failed(node_id, NodeNotFoundError(node_id))
            return

        logger.info("Pass #%d: running node %s only", token.serial, node_id)
        async for event in self._schedule(token, graph, [node]):
            yield event

    def _check_cycles(self, token: CancellationToken, order: ExecutionOrder) -> ExecutionEvent | None:
        if not order.unreachable:
            return None
        if self.cycle_policy is CyclePolicy.SKIP:
            logger.warning(
                "Pass #%d: skipping %d nodes caught in a cycle: %s",
                token.serial, len(order.unreachable), order.unreachable,
            )
            return None
        error = CycleError(order.unreachable)
        logger.warning("Pass #%d: %s", token.serial, error)
        return ExecutionEvent.failed(order.unreachable[0], error)

    async def _schedule(
        self,
        token: CancellationToken,
        graph: Graph,
        nodes: list[BaseNode],
        stale: set[NodeId] | None = None,
    ):
        """Run `nodes` in the given order, one at a time.

        Cached outputs of nodes in `stale` are not read until this pass has
        written them again; a stale node that fails stays absent.
        """
        stale = set() if stale is None else stale
        total = len(nodes)
        for index, node in enumerate(nodes):
            # Liveness is only checked between nodes
            if not self.sessions.is_active(token):
                logger.info("Pass #%d stopped before node %s", token.serial, node.id)
                return

            inputs = resolve_inputs(node, graph, self.results, exclude=stale)

            if node.mode != NodeMode.NORMAL:
                outputs = self.results.put(node.id, simulate_outputs(node, inputs))
                stale.discard(node.id)
                logger.debug("Pass #%d: node %s %s", token.serial, node.id, node.mode.name.lower())
                yield ExecutionEvent.completed(node.id, (index + 1) / total * 100, outputs)
                continue

            logger.debug("Pass #%d: node %s running", token.serial, node.id)
            yield ExecutionEvent.running(node.id, index / total * 100)
            try:
                outputs = await node.run(inputs)
            except Exception as e:
                logger.warning(
                    "Pass #%d: node %s (%s) failed: %s",
                    token.serial, node.id, node.node_type, e, exc_info=True,
                )
                yield ExecutionEvent.failed(node.id, e)
                if self.error_policy is ErrorPolicy.STOP:
                    logger.info("Pass #%d stopped after failure of node %s", token.serial, node.id)
                    return
                continue

            cached = self.results.put(node.id, outputs)
            stale.discard(node.id)
            logger.debug("Pass #%d: node %s completed", token.serial, node.id)
            yield ExecutionEvent.completed(node.id, (index + 1) / total * 100, cached)

        logger.info("Pass #%d finished", token.serial)
