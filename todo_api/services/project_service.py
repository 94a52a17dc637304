from sqlalchemy.orm import Session

from todo_api.models.project import Project
from todo_api.models.task_item import TaskItem
from todo_api.schemas.project import ProjectCreateRequest, ProjectUpdateRequest
from todo_api.services.task_service import serialize_task
from todo_api.utils.exceptions import NotFoundException


def _serialize(p: Project) -> dict:
    return {
        "id":          p.id,
        "name":        p.name,
        "description": p.description,
        "createdAt":   p.createdAt,
        "dueDate":     p.dueDate,
        "isCompleted": p.isCompleted,
        "userId":      p.userId,
        "tasks":       [serialize_task(t) for t in p.tasks if not t.isDeleted],
    }


class ProjectService:

    def _get_owned(self, db: Session, project_id: int, user_id: int) -> Project:
        p = db.query(Project).filter(
            Project.id == project_id,
            Project.userId == user_id,
            Project.isDeleted == False,
        ).first()
        if not p:
            raise NotFoundException("Project")
        return p

    def list_projects(self, db: Session, user_id: int) -> list[dict]:
        items = db.query(Project).filter(
            Project.userId == user_id,
            Project.isDeleted == False,
        ).order_by(Project.id).all()
        return [_serialize(p) for p in items]

    def get_project(self, db: Session, project_id: int, user_id: int) -> dict:
        return _serialize(self._get_owned(db, project_id, user_id))

    def create_project(self, db: Session, data: ProjectCreateRequest, user_id: int) -> dict:
        project = Project(
            name=data.name,
            description=data.description,
            dueDate=data.dueDate,
            userId=user_id,
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        return _serialize(project)

    def update_project(self, db: Session, project_id: int, data: ProjectUpdateRequest, user_id: int) -> None:
        p = self._get_owned(db, project_id, user_id)

        if data.name is not None:        p.name        = data.name
        if data.description is not None: p.description = data.description
        if data.dueDate is not None:     p.dueDate     = data.dueDate
        if data.isCompleted is not None: p.isCompleted = data.isCompleted

        db.commit()

    def delete_project(self, db: Session, project_id: int, user_id: int) -> None:
        """Soft delete the project and every task filed under it."""
        p = self._get_owned(db, project_id, user_id)
        p.isDeleted = True
        db.query(TaskItem).filter(TaskItem.projectId == p.id).update(
            {"isDeleted": True}, synchronize_session=False,
        )
        db.commit()


project_service = ProjectService()
