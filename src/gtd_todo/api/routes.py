"""REST API routes for todo operations."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from gtd_todo.tools.todo_tools import (
    handle_add,
    handle_capture,
    handle_completed,
    handle_delete,
    handle_done,
    handle_due,
    handle_inbox,
    handle_list,
    handle_process,
)

# Error code (exception class name) -> HTTP status
STATUS_BY_CODE = {
    "ValidationError": 400,
    "InvalidDate": 400,
    "UnrecognizedToken": 400,
    "NotFound": 404,
    "IndexOutOfRange": 404,
    "StoreUnavailable": 503,
}


class CaptureBody(BaseModel):
    text: str


class TaskAddBody(BaseModel):
    text: str
    priority: Optional[str] = None
    project: Optional[str] = None
    context: Optional[str] = None
    due: Optional[str] = None


class ProcessBody(BaseModel):
    action: str
    priority: Optional[str] = None
    project: Optional[str] = None
    context: Optional[str] = None
    due: Optional[str] = None


def _checked(result: dict) -> dict:
    if "error" in result:
        status = STATUS_BY_CODE.get(result.get("code"), 400)
        raise HTTPException(status_code=status, detail=result["error"])
    return result


def register_todo_routes(app_router: APIRouter, store) -> None:
    """Attach todo REST routes that use the shared store."""

    @app_router.get("/tasks")
    def list_tasks(
        view: str = Query("actionable"),
        filter: Optional[str] = Query(None),
    ):
        return _checked(handle_list(store, view=view, filter=filter))

    @app_router.post("/tasks", status_code=201)
    def add_task(body: TaskAddBody):
        return _checked(handle_add(store, **body.model_dump()))

    @app_router.post("/tasks/{number}/done")
    def complete_task(number: int):
        return _checked(handle_done(store, number=number))

    @app_router.delete("/tasks/{number}")
    def delete_task(
        number: int,
        expected: Optional[str] = Query(None),
        confirm: bool = Query(False),
    ):
        return _checked(handle_delete(store, number=number, expected=expected, confirm=confirm))

    @app_router.get("/inbox")
    def list_inbox():
        return _checked(handle_inbox(store))

    @app_router.post("/inbox", status_code=201)
    def capture(body: CaptureBody):
        return _checked(handle_capture(store, text=body.text))

    @app_router.post("/inbox/{number}/process")
    def process_item(number: int, body: ProcessBody):
        return _checked(handle_process(store, number=number, **body.model_dump()))

    @app_router.get("/due")
    def due_tasks(window: Optional[str] = Query(None)):
        return _checked(handle_due(store, window=window))

    @app_router.get("/completed")
    def completed_tasks():
        return _checked(handle_completed(store))
