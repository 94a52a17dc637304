from sqlalchemy.orm import Session

from todo_api.models.project import Project
from todo_api.models.task_item import TaskItem
from todo_api.schemas.task import TaskCreateRequest, TaskUpdateRequest
from todo_api.utils.exceptions import InvalidProjectException, NotFoundException
from todo_api.utils.security import utc_now


def serialize_task(t: TaskItem) -> dict:
    return {
        "id":          t.id,
        "title":       t.title,
        "description": t.description,
        "isCompleted": t.isCompleted,
        "createdAt":   t.createdAt,
        "dueDate":     t.dueDate,
        "completedAt": t.completedAt,
        "priority":    t.priority,
        "category":    t.category,
        "repeatType":  t.repeatType,
        "projectId":   t.projectId,
        "projectName": t.project.name if t.project else None,
        "userId":      t.userId,
    }


class TaskService:

    def _check_project(self, db: Session, project_id: int, user_id: int) -> None:
        """The project must exist, belong to the caller and not be deleted."""
        exists = db.query(Project.id).filter(
            Project.id == project_id,
            Project.userId == user_id,
            Project.isDeleted == False,
        ).first()
        if not exists:
            raise InvalidProjectException()

    def _get_owned(self, db: Session, task_id: int, user_id: int) -> TaskItem:
        t = db.query(TaskItem).filter(
            TaskItem.id == task_id,
            TaskItem.userId == user_id,
            TaskItem.isDeleted == False,
        ).first()
        if not t:
            raise NotFoundException("Task")
        return t

    def list_tasks(self, db: Session, user_id: int, project_id: int | None) -> list[dict]:
        q = db.query(TaskItem).filter(
            TaskItem.userId == user_id,
            TaskItem.isDeleted == False,
        )
        if project_id is not None:
            q = q.filter(TaskItem.projectId == project_id)
        return [serialize_task(t) for t in q.order_by(TaskItem.id).all()]

    def get_task(self, db: Session, task_id: int, user_id: int) -> dict:
        return serialize_task(self._get_owned(db, task_id, user_id))

    def create_task(self, db: Session, data: TaskCreateRequest, user_id: int) -> dict:
        if data.projectId is not None:
            self._check_project(db, data.projectId, user_id)

        task = TaskItem(
            title=data.title,
            description=data.description,
            dueDate=data.dueDate,
            priority=data.priority,
            category=data.category,
            repeatType=data.repeatType,
            projectId=data.projectId,
            userId=user_id,
            isCompleted=False,
        )
        db.add(task)
        db.commit()
        db.refresh(task)
        return serialize_task(task)

    def update_task(self, db: Session, task_id: int, data: TaskUpdateRequest, user_id: int) -> None:
        t = self._get_owned(db, task_id, user_id)

        if data.projectId is not None:
            self._check_project(db, data.projectId, user_id)
            t.projectId = data.projectId

        if data.title is not None:       t.title       = data.title
        if data.description is not None: t.description = data.description
        if data.isCompleted is not None:
            t.isCompleted = data.isCompleted
            t.completedAt = utc_now() if data.isCompleted else None
        if data.dueDate is not None:     t.dueDate     = data.dueDate
        if data.priority is not None:    t.priority    = data.priority
        if data.category is not None:    t.category    = data.category
        if data.repeatType is not None:  t.repeatType  = data.repeatType

        db.commit()

    def delete_task(self, db: Session, task_id: int, user_id: int) -> None:
        t = self._get_owned(db, task_id, user_id)
        t.isDeleted = True
        db.commit()


task_service = TaskService()
