"""
In-process registry of CLI-triggered tasks.

Tracks whether a task is running, completed or failed so a session cannot start a second
task while one is still alive. Records live for an hour and are purged lazily on every
read and write. A task running for more than ten minutes is stale and may be superseded.

State is per process and does not survive a restart.
"""
import threading
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, Literal

from studio.core.errors import BadRequestError, ConflictError

RECORD_TTL_MS = 60 * 60 * 1000
TASK_TIMEOUT_MS = 10 * 60 * 1000

TaskStatus = Literal["running", "completed", "failed"]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TaskRecord:
    taskId: str
    sessionId: str
    status: TaskStatus
    startedAt: int
    completedAt: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if data["completedAt"] is None:
            del data["completedAt"]
        return data


class TaskRegistry:
    def __init__(self, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._records: dict[str, TaskRecord] = {}
        # Sync route handlers run on a threadpool.
        self._lock = threading.Lock()

    def _purge(self) -> None:
        now = self._clock()
        for task_id in [k for k, r in self._records.items() if now - r.startedAt > RECORD_TTL_MS]:
            del self._records[task_id]

    def _is_stale(self, record: TaskRecord) -> bool:
        return record.status == "running" and self._clock() - record.startedAt > TASK_TIMEOUT_MS

    def get(self, task_id: str) -> dict[str, Any]:
        with self._lock:
            self._purge()
            record = self._records.get(task_id)
            if record is None:
                return {"found": False, "taskId": task_id}
            return {"found": True, **record.to_dict(), "isStale": self._is_stale(record)}

    def by_session(self, session_id: str) -> dict[str, Any]:
        with self._lock:
            self._purge()
            tasks = [r.to_dict() for r in self._records.values() if r.sessionId == session_id]
            return {"sessionId": session_id, "tasks": tasks}

    def counts(self) -> dict[str, int]:
        with self._lock:
            self._purge()
            statuses = [r.status for r in self._records.values()]
            return {
                "totalTasks": len(statuses),
                "running": statuses.count("running"),
                "completed": statuses.count("completed"),
                "failed": statuses.count("failed"),
            }

    def start(self, task_id: str, session_id: str | None) -> dict[str, Any]:
        if not session_id:
            raise BadRequestError("sessionId is required for start")
        with self._lock:
            self._purge()
            running = next(
                (
                    r for r in self._records.values()
                    if r.sessionId == session_id and r.status == "running"
                ),
                None,
            )
            if running is not None and running.taskId != task_id:
                if self._is_stale(running):
                    running.status = "failed"
                    running.completedAt = self._clock()
                else:
                    raise ConflictError(
                        "Session already has a running task", runningTask=running.to_dict()
                    )

            record = TaskRecord(
                taskId=task_id, sessionId=session_id, status="running", startedAt=self._clock()
            )
            self._records[task_id] = record
            return {"success": True, "record": record.to_dict()}

    def complete(
        self, task_id: str, session_id: str | None = None, status: str | None = None
    ) -> dict[str, Any]:
        final_status: TaskStatus = "failed" if status == "failed" else "completed"
        with self._lock:
            self._purge()
            now = self._clock()
            record = self._records.get(task_id)
            if record is None:
                record = TaskRecord(
                    taskId=task_id,
                    sessionId=session_id or "unknown",
                    status=final_status,
                    startedAt=now,
                    completedAt=now,
                )
                self._records[task_id] = record
                return {"success": True, "record": record.to_dict(), "wasUntracked": True}

            record.status = final_status
            record.completedAt = now
            return {"success": True, "record": record.to_dict()}

    def heartbeat(self, task_id: str) -> dict[str, Any]:
        with self._lock:
            self._purge()
            record = self._records.get(task_id)
            if record is None or record.status != "running":
                return {"success": False, "error": "Task not found or not running"}
            record.startedAt = self._clock()
            return {"success": True, "record": record.to_dict()}

    def clear(self, session_id: str | None) -> dict[str, Any]:
        if not session_id:
            raise BadRequestError("sessionId is required for clear")
        with self._lock:
            self._purge()
            doomed = [k for k, r in self._records.items() if r.sessionId == session_id]
            for task_id in doomed:
                del self._records[task_id]
            return {"success": True, "cleared": len(doomed)}

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._records.pop(task_id, None) is not None

    def apply(
        self,
        action: str | None,
        task_id: str,
        session_id: str | None = None,
        status: str | None = None,
    ) -> dict[str, Any]:
        if action == "start":
            return self.start(task_id, session_id)
        if action == "complete":
            return self.complete(task_id, session_id, status)
        if action == "heartbeat":
            return self.heartbeat(task_id)
        if action == "clear":
            return self.clear(session_id)
        raise BadRequestError("Invalid action")


task_registry = TaskRegistry()
