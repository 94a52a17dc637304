from fastapi import APIRouter, Depends, Request, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from todo_api.database import get_db
from todo_api.dependencies import get_current_user
from todo_api.models.user import User
from todo_api.schemas.common import error_responses
from todo_api.schemas.task import TaskCreateRequest, TaskOut, TaskUpdateRequest
from todo_api.services.task_service import task_service

router = APIRouter(prefix="/tasks", responses=error_responses(401))


@router.get("", summary="List own tasks", response_model=list[TaskOut])
def list_tasks(
    projectId: Optional[int] = Query(None),
    db:        Session       = Depends(get_db),
    current_user: User       = Depends(get_current_user),
):
    return task_service.list_tasks(db, current_user.id, projectId)


@router.get("/{task_id}", summary="Get task by ID", response_model=TaskOut,
            responses=error_responses(404))
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.get_task(db, task_id, current_user.id)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create task",
             response_model=TaskOut, responses=error_responses(400))
def create_task(
    body: TaskCreateRequest,
    request: Request,
    response: Response,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = task_service.create_task(db, body, current_user.id)
    response.headers["Location"] = str(request.url_for("get_task", task_id=data["id"]))
    return data


@router.put("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update task",
            response_class=Response, responses=error_responses(400, 404))
def update_task(
    task_id: int,
    body:    TaskUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task_service.update_task(db, task_id, body, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete task",
               response_class=Response, responses=error_responses(404))
def delete_task(
    task_id: int,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task_service.delete_task(db, task_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
