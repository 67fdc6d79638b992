"""
api/routes/todo.py -- Per-user task CRUD.

Routes (all require auth; mutating routes also require CSRF):
  GET    /todo       -- list the caller's tasks, newest first
  GET    /todo/{id}  -- one task; 404 if missing or not the caller's
  POST   /todo       -- create; 201
  PATCH  /todo/{id}  -- update title/description; 403 if not the caller's
  DELETE /todo/{id}  -- delete; 204; 403 if not the caller's

Guard order per request: csrf_protect (router dependency) runs first, then
get_current_user (endpoint dependency), then the handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import CreateTaskRequest, TaskResponse, UpdateTaskRequest
from auth.csrf import csrf_protect
from auth.dependencies import get_current_user
from auth.models import User
from tasks.models import Task
from tasks.store import TaskStore

router = APIRouter(prefix="/todo", dependencies=[Depends(csrf_protect)])


def _task_to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _no_permission(action: str) -> HTTPException:
    return HTTPException(
        status_code=403,
        detail={"code": "no_permission", "message": f"No permission to {action}."},
    )


@router.get("", response_model=list[TaskResponse])
def get_tasks(request: Request, current_user: User = Depends(get_current_user)) -> list[TaskResponse]:
    task_store: TaskStore = request.app.state.task_store
    return [_task_to_response(t) for t in task_store.list_tasks(current_user.id)]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task_by_id(
    request: Request,
    task_id: int,
    current_user: User = Depends(get_current_user),
) -> TaskResponse:
    task_store: TaskStore = request.app.state.task_store
    task = task_store.get_task(current_user.id, task_id)
    if task is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Task not found."},
        )
    return _task_to_response(task)


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(
    request: Request,
    body: CreateTaskRequest,
    current_user: User = Depends(get_current_user),
) -> TaskResponse:
    task_store: TaskStore = request.app.state.task_store
    task = task_store.create_task(current_user.id, body.title, body.description)
    return _task_to_response(task)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task_by_id(
    request: Request,
    task_id: int,
    body: UpdateTaskRequest,
    current_user: User = Depends(get_current_user),
) -> TaskResponse:
    """Apply only the fields present in the body.

    Missing and foreign tasks both return 403, matching delete.
    """
    task_store: TaskStore = request.app.state.task_store
    updates = body.model_dump(exclude_unset=True)
    # title is NOT NULL; an explicit null means "leave it alone".
    if updates.get("title", "") is None:
        del updates["title"]
    if updates:
        updated = task_store.update_task(current_user.id, task_id, **updates)
        if not updated:
            raise _no_permission("update")
    task = task_store.get_task(current_user.id, task_id)
    if task is None:
        raise _no_permission("update")
    return _task_to_response(task)


@router.delete("/{task_id}", status_code=204)
def delete_task_by_id(
    request: Request,
    task_id: int,
    current_user: User = Depends(get_current_user),
) -> Response:
    task_store: TaskStore = request.app.state.task_store
    if not task_store.delete_task(current_user.id, task_id):
        raise _no_permission("delete")
    return Response(status_code=204)
