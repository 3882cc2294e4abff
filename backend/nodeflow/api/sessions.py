"""Per-client execution sessions: one engine (and result cache) per session id."""
import asyncio
import logging
from dataclasses import dataclass, field

from ..config import settings
from ..engine.runner import ExecutionEngine

logger = logging.getLogger(__name__)


@dataclass
class ExecutionSession:
    session_id: str
    engine: ExecutionEngine = field(default_factory=ExecutionEngine)
    task: asyncio.Task | None = None
    execution_id: str | None = None  # latest pass started in this session


_sessions: dict[str, ExecutionSession] = {}


def get_or_create_session(session_id: str) -> ExecutionSession:
    session = _sessions.get(session_id)
    if session is not None:
        return session
    # Evict oldest sessions if at capacity
    while len(_sessions) >= settings.max_sessions:
        evicted = _sessions.pop(next(iter(_sessions)))
        evicted.engine.cancel()
        logger.info("Evicted session %s", evicted.session_id)
    session = ExecutionSession(session_id)
    _sessions[session_id] = session
    return session


def get_session(session_id: str) -> ExecutionSession | None:
    return _sessions.get(session_id)


def remove_session(session_id: str) -> ExecutionSession | None:
    session = _sessions.pop(session_id, None)
    if session is not None:
        session.engine.cancel()
    return session


def clear_sessions() -> None:
    for session_id in list(_sessions):
        remove_session(session_id)
