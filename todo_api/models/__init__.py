"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from todo_api.models.user import User
from todo_api.models.project import Project
from todo_api.models.task_item import TaskItem, TaskPriority

__all__ = [
    "User",
    "Project",
    "TaskItem",
    "TaskPriority",
]
