from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from todo_api.database import get_db
from todo_api.dependencies import get_current_user
from todo_api.models.user import User
from todo_api.schemas.common import error_responses
from todo_api.schemas.project import ProjectCreateRequest, ProjectOut, ProjectUpdateRequest
from todo_api.services.project_service import project_service

router = APIRouter(prefix="/projects", responses=error_responses(401))


@router.get("", summary="List own projects", response_model=list[ProjectOut])
def list_projects(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return project_service.list_projects(db, current_user.id)


@router.get("/{project_id}", summary="Get project by ID", response_model=ProjectOut,
            responses=error_responses(404))
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return project_service.get_project(db, project_id, current_user.id)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create project",
             response_model=ProjectOut)
def create_project(
    body: ProjectCreateRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = project_service.create_project(db, body, current_user.id)
    response.headers["Location"] = str(request.url_for("get_project", project_id=data["id"]))
    return data


@router.put("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update project",
            response_class=Response, responses=error_responses(404))
def update_project(
    project_id: int,
    body: ProjectUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project_service.update_project(db, project_id, body, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT,
               summary="Delete project and its tasks", response_class=Response,
               responses=error_responses(404))
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project_service.delete_project(db, project_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
