from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel

from studio.core.errors import BadRequestError
from studio.task_registry import task_registry

router = APIRouter()


class TaskAction(BaseModel):
    action: str | None = None
    taskId: str | None = None
    sessionId: str | None = None
    status: str | None = None


@router.get("")
def read_tasks(
    task_id: str | None = Query(default=None, alias="taskId"),
    session_id: str | None = Query(default=None, alias="sessionId"),
) -> Any:
    if task_id:
        return task_registry.get(task_id)
    if session_id:
        return task_registry.by_session(session_id)
    return task_registry.counts()


@router.post("")
def update_task(body: TaskAction) -> Any:
    if not body.taskId:
        raise BadRequestError("taskId is required")
    return task_registry.apply(body.action, body.taskId, body.sessionId, body.status)


@router.delete("")
def delete_task(task_id: str | None = Query(default=None, alias="taskId")) -> Any:
    if not task_id:
        raise BadRequestError("taskId is required")
    return {"success": task_registry.delete(task_id), "taskId": task_id}
