import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from todo_api.database import Base


class TaskPriority(str, enum.Enum):
    LOW    = "Low"
    MEDIUM = "Medium"
    HIGH   = "High"


class TaskItem(Base):
    __tablename__ = "task_items"

    id          = Column(Integer, primary_key=True, index=True)
    title       = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    isCompleted = Column(Boolean, default=False, nullable=False)
    createdAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    dueDate     = Column(TIMESTAMP(timezone=True), nullable=True)
    completedAt = Column(TIMESTAMP(timezone=True), nullable=True)
    priority    = Column(String(20), default=TaskPriority.MEDIUM.value, nullable=True)
    category    = Column(String(100), nullable=True)
    repeatType  = Column(String(50), nullable=True)
    isDeleted   = Column(Boolean, default=False, nullable=False)
    userId      = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    projectId   = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user    = relationship("User", back_populates="tasks")
    project = relationship("Project", back_populates="tasks")

    def __repr__(self):
        return f"<TaskItem id={self.id} title={self.title} projectId={self.projectId}>"
