from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional

from todo_api.schemas.task import TaskOut


class ProjectCreateRequest(BaseModel):
    name:        str
    description: Optional[str]      = None
    dueDate:     Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip(): raise ValueError("Name cannot be empty")
        if len(v) > 100: raise ValueError("Name must be at most 100 characters")
        return v.strip()

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        if v is not None and len(v) > 500: raise ValueError("Description must be at most 500 characters")
        return v


class ProjectUpdateRequest(BaseModel):
    name:        Optional[str]      = None
    description: Optional[str]      = None
    dueDate:     Optional[datetime] = None
    isCompleted: Optional[bool]     = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is not None and len(v) > 100: raise ValueError("Name must be at most 100 characters")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        if v is not None and len(v) > 500: raise ValueError("Description must be at most 500 characters")
        return v


class ProjectOut(BaseModel):
    id:          int
    name:        str
    description: Optional[str]
    createdAt:   datetime
    dueDate:     Optional[datetime]
    isCompleted: bool
    userId:      int
    tasks:       list[TaskOut] = []
