"""Status events emitted by the scheduler."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .graph import NodeId


class ExecutionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class ExecutionEvent:
    node_id: NodeId
    status: ExecutionStatus
    progress: float | None = None
    result: Mapping[str, Any] | None = None  # on completed
    error: BaseException | None = None       # on error

    @classmethod
    def running(cls, node_id: NodeId, progress: float) -> "ExecutionEvent":
        return cls(node_id, ExecutionStatus.RUNNING, progress=progress)

    @classmethod
    def completed(
        cls, node_id: NodeId, progress: float, result: Mapping[str, Any]
    ) -> "ExecutionEvent":
        return cls(node_id, ExecutionStatus.COMPLETED, progress=progress, result=result)

    @classmethod
    def failed(cls, node_id: NodeId, error: BaseException) -> "ExecutionEvent":
        return cls(node_id, ExecutionStatus.ERROR, error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"node_id": self.node_id, "status": self.status.value}
        if self.progress is not None:
            data["progress"] = self.progress
        if self.result is not None:
            data["result"] = dict(self.result)
        if self.error is not None:
            data["error"] = str(self.error)
            data["error_type"] = type(self.error).__name__
        return data
