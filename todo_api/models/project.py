from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from todo_api.database import Base


class Project(Base):
    __tablename__ = "projects"

    id          = Column(Integer, primary_key=True, index=True)
    name        = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    createdAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    dueDate     = Column(TIMESTAMP(timezone=True), nullable=True)
    isCompleted = Column(Boolean, default=False, nullable=False)
    isDeleted   = Column(Boolean, default=False, nullable=False)
    userId      = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user  = relationship("User", back_populates="projects")
    tasks = relationship("TaskItem", back_populates="project")

    def __repr__(self):
        return f"<Project id={self.id} name={self.name} userId={self.userId}>"
