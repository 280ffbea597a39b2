# src/task_tracker/connectors/http_api.py

from __future__ import annotations

"""
HTTP connector.

Maps requests 1:1 onto store operations and store errors onto status codes:
- NotFound            -> 404
- SchedulingConflict  -> 406
- InvalidArgument     -> 400
- ValidationError     -> 400

No business rules live here: overlap checks, rollups and history are the
store's job. Every handler holds state.lock for the duration of the store call.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core.state import AppState
from ..tasks.errors import InvalidArgument, NotFound, SchedulingConflict, ValidationError
from ..tasks.task_models import Epic, Subtask, Task, TaskKind, TaskStatus, WorkItem

logger = logging.getLogger(__name__)


# --- Request/Response Models ---


class ItemIn(BaseModel):
    """Task body. With `id` the request is an update, without it a create."""

    id: int | None = None
    name: str
    description: str = ""
    status: TaskStatus = TaskStatus.NEW
    duration: int | None = Field(default=None, ge=0, description="Minutes")
    start_time: datetime | None = None


class SubtaskIn(ItemIn):
    epic_id: int


class EpicIn(BaseModel):
    """Epics only carry name/description; status and times are derived."""

    id: int | None = None
    name: str
    description: str = ""


class ItemOut(BaseModel):
    id: int
    kind: TaskKind
    name: str
    description: str
    status: TaskStatus
    duration: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    epic_id: int | None = None
    subtask_ids: list[int] | None = None

    @classmethod
    def from_item(cls, item: WorkItem) -> ItemOut:
        return cls(
            id=item.id,
            kind=item.kind,
            name=item.name,
            description=item.description,
            status=item.status,
            duration=None if item.duration is None else int(item.duration.total_seconds() // 60),
            start_time=item.start_time,
            end_time=item.end_time,
            epic_id=item.epic_id if isinstance(item, Subtask) else None,
            subtask_ids=list(item.subtask_ids) if isinstance(item, Epic) else None,
        )


class IdOut(BaseModel):
    id: int


class MessageOut(BaseModel):
    message: str


# --- Helpers ---


def _minutes(value: int | None) -> timedelta | None:
    return None if value is None else timedelta(minutes=value)


def _task_from(body: ItemIn) -> Task:
    return Task(
        name=body.name,
        description=body.description,
        status=body.status,
        duration=_minutes(body.duration),
        start_time=body.start_time,
        id=body.id or 0,
    )


def _subtask_from(body: SubtaskIn) -> Subtask:
    return Subtask(
        name=body.name,
        description=body.description,
        status=body.status,
        duration=_minutes(body.duration),
        start_time=body.start_time,
        id=body.id or 0,
        epic_id=body.epic_id,
    )


def _state(request: Request) -> AppState:
    return request.app.state.tracker


def _not_found(kind: str, item_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind} not found: {item_id}")


# --- Routes ---

router = APIRouter()


@router.get("/tasks", response_model=list[ItemOut])
def list_tasks(request: Request):
    st = _state(request)
    with st.lock:
        return [ItemOut.from_item(t) for t in st.store.get_all_tasks()]


@router.get("/tasks/{task_id}", response_model=ItemOut)
def get_task(task_id: int, request: Request):
    st = _state(request)
    with st.lock:
        task = st.store.get_task_by_id(task_id)
    if task is None:
        raise _not_found("Task", task_id)
    return ItemOut.from_item(task)


@router.post("/tasks", response_model=IdOut, status_code=status.HTTP_201_CREATED)
def upsert_task(body: ItemIn, request: Request, response: Response):
    st = _state(request)
    task = _task_from(body)
    with st.lock:
        if body.id:
            st.store.update_task(task)
            response.status_code = status.HTTP_200_OK
            return IdOut(id=task.id)
        return IdOut(id=st.store.create_task(task))


@router.delete("/tasks", response_model=MessageOut)
def delete_all_tasks(request: Request):
    st = _state(request)
    with st.lock:
        st.store.delete_all_tasks()
    return MessageOut(message="All tasks deleted")


@router.delete("/tasks/{task_id}", response_model=MessageOut)
def delete_task(task_id: int, request: Request):
    st = _state(request)
    with st.lock:
        deleted = st.store.delete_task_by_id(task_id)
    if not deleted:
        raise _not_found("Task", task_id)
    return MessageOut(message=f"Task {task_id} deleted")


@router.get("/subtasks", response_model=list[ItemOut])
def list_subtasks(request: Request):
    st = _state(request)
    with st.lock:
        return [ItemOut.from_item(s) for s in st.store.get_all_subtasks()]


@router.get("/subtasks/{subtask_id}", response_model=ItemOut)
def get_subtask(subtask_id: int, request: Request):
    st = _state(request)
    with st.lock:
        subtask = st.store.get_subtask_by_id(subtask_id)
    if subtask is None:
        raise _not_found("Subtask", subtask_id)
    return ItemOut.from_item(subtask)


@router.post("/subtasks", response_model=IdOut, status_code=status.HTTP_201_CREATED)
def upsert_subtask(body: SubtaskIn, request: Request, response: Response):
    st = _state(request)
    subtask = _subtask_from(body)
    with st.lock:
        if body.id:
            st.store.update_subtask(subtask)
            response.status_code = status.HTTP_200_OK
            return IdOut(id=subtask.id)
        return IdOut(id=st.store.create_subtask(subtask))


@router.delete("/subtasks", response_model=MessageOut)
def delete_all_subtasks(request: Request):
    st = _state(request)
    with st.lock:
        st.store.delete_all_subtasks()
    return MessageOut(message="All subtasks deleted")


@router.delete("/subtasks/{subtask_id}", response_model=MessageOut)
def delete_subtask(subtask_id: int, request: Request):
    st = _state(request)
    with st.lock:
        deleted = st.store.delete_subtask_by_id(subtask_id)
    if not deleted:
        raise _not_found("Subtask", subtask_id)
    return MessageOut(message=f"Subtask {subtask_id} deleted")


@router.get("/epics", response_model=list[ItemOut])
def list_epics(request: Request):
    st = _state(request)
    with st.lock:
        return [ItemOut.from_item(e) for e in st.store.get_all_epics()]


@router.get("/epics/{epic_id}", response_model=ItemOut)
def get_epic(epic_id: int, request: Request):
    st = _state(request)
    with st.lock:
        epic = st.store.get_epic_by_id(epic_id)
    if epic is None:
        raise _not_found("Epic", epic_id)
    return ItemOut.from_item(epic)


@router.get("/epics/{epic_id}/subtasks", response_model=list[ItemOut])
def get_epic_subtasks(epic_id: int, request: Request):
    st = _state(request)
    with st.lock:
        return [ItemOut.from_item(s) for s in st.store.get_subtasks_by_epic_id(epic_id)]


@router.post("/epics", response_model=IdOut, status_code=status.HTTP_201_CREATED)
def upsert_epic(body: EpicIn, request: Request, response: Response):
    st = _state(request)
    epic = Epic(name=body.name, description=body.description, id=body.id or 0)
    with st.lock:
        if body.id:
            st.store.update_epic(epic)
            response.status_code = status.HTTP_200_OK
            return IdOut(id=epic.id)
        return IdOut(id=st.store.create_epic(epic))


@router.delete("/epics", response_model=MessageOut)
def delete_all_epics(request: Request):
    st = _state(request)
    with st.lock:
        st.store.delete_all_epics()
    return MessageOut(message="All epics deleted")


@router.delete("/epics/{epic_id}", response_model=MessageOut)
def delete_epic(epic_id: int, request: Request):
    st = _state(request)
    with st.lock:
        deleted = st.store.delete_epic_by_id(epic_id)
    if not deleted:
        raise _not_found("Epic", epic_id)
    return MessageOut(message=f"Epic {epic_id} deleted")


@router.get("/history", response_model=list[ItemOut])
def get_history(request: Request):
    st = _state(request)
    with st.lock:
        return [ItemOut.from_item(i) for i in st.store.get_history()]


@router.get("/prioritized", response_model=list[ItemOut])
def get_prioritized(request: Request):
    st = _state(request)
    with st.lock:
        return [ItemOut.from_item(i) for i in st.store.get_prioritized_tasks()]


# --- App ---


def _error_handler(code: int):
    def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, code, exc)
        return JSONResponse(status_code=code, content={"detail": str(exc)})

    return handler


def create_app(state: AppState) -> FastAPI:
    app = FastAPI(
        title=str(getattr(state.settings, "app_name", "task-tracker")),
        description="Tasks, epics and subtasks with derived epic status and a conflict-free schedule",
    )
    app.state.tracker = state
    app.include_router(router)

    app.add_exception_handler(NotFound, _error_handler(status.HTTP_404_NOT_FOUND))
    app.add_exception_handler(SchedulingConflict, _error_handler(status.HTTP_406_NOT_ACCEPTABLE))
    app.add_exception_handler(InvalidArgument, _error_handler(status.HTTP_400_BAD_REQUEST))
    app.add_exception_handler(ValidationError, _error_handler(status.HTTP_400_BAD_REQUEST))
    return app


# --- Background runner ---


@dataclass
class HttpBackgroundRunner:
    thread: threading.Thread
    server: uvicorn.Server

    def stop(self) -> None:
        self.server.should_exit = True

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_http_in_background(state: AppState) -> HttpBackgroundRunner | None:
    """
    Start the HTTP server in a background thread (so console REPL can run in parallel).

    uvicorn only installs signal handlers on the main thread, so Ctrl+C is
    still handled by cli.main.
    """
    settings = state.settings
    if not getattr(settings, "http_enabled", False):
        logger.info("HTTP connector disabled, not starting.")
        return None

    host = str(getattr(settings, "http_host", "127.0.0.1"))
    port = int(getattr(settings, "http_port", 8080))

    config = uvicorn.Config(create_app(state), host=host, port=port, log_config=None)
    server = uvicorn.Server(config)

    t = threading.Thread(target=server.run, name="http-connector", daemon=True)
    t.start()

    logger.info("HTTP connector listening on http://%s:%s", host, port)
    return HttpBackgroundRunner(thread=t, server=server)
