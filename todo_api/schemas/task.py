from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional

from todo_api.models.task_item import TaskPriority

PRIORITIES = [p.value for p in TaskPriority]


def check_priority(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in PRIORITIES:
        raise ValueError("Priority must be Low, Medium or High")
    return v


class TaskCreateRequest(BaseModel):
    title:       str
    description: Optional[str]      = None
    dueDate:     Optional[datetime] = None
    priority:    Optional[str]      = TaskPriority.MEDIUM.value
    category:    Optional[str]      = None
    repeatType:  Optional[str]      = None
    projectId:   Optional[int]      = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        if not v.strip(): raise ValueError("Title cannot be empty")
        if len(v) > 200: raise ValueError("Title must be at most 200 characters")
        return v.strip()

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        if v is not None and len(v) > 1000: raise ValueError("Description must be at most 1000 characters")
        return v

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return check_priority(v)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        if v is not None and len(v) > 100: raise ValueError("Category must be at most 100 characters")
        return v

    @field_validator("repeatType")
    @classmethod
    def check_repeat_type(cls, v):
        if v is not None and len(v) > 50: raise ValueError("RepeatType must be at most 50 characters")
        return v


class TaskUpdateRequest(BaseModel):
    title:       Optional[str]      = None
    description: Optional[str]      = None
    isCompleted: Optional[bool]     = None
    dueDate:     Optional[datetime] = None
    priority:    Optional[str]      = None
    category:    Optional[str]      = None
    repeatType:  Optional[str]      = None
    projectId:   Optional[int]      = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        if v is not None and len(v) > 200: raise ValueError("Title must be at most 200 characters")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        if v is not None and len(v) > 1000: raise ValueError("Description must be at most 1000 characters")
        return v

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return check_priority(v)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        if v is not None and len(v) > 100: raise ValueError("Category must be at most 100 characters")
        return v

    @field_validator("repeatType")
    @classmethod
    def check_repeat_type(cls, v):
        if v is not None and len(v) > 50: raise ValueError("RepeatType must be at most 50 characters")
        return v


class TaskOut(BaseModel):
    id:          int
    title:       str
    description: Optional[str]
    isCompleted: bool
    createdAt:   datetime
    dueDate:     Optional[datetime]
    completedAt: Optional[datetime]
    priority:    Optional[str]
    category:    Optional[str]
    repeatType:  Optional[str]
    projectId:   Optional[int]
    projectName: Optional[str] = None
    userId:      int
