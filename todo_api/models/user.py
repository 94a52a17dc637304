from sqlalchemy import Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from todo_api.database import Base


class User(Base):
    __tablename__ = "users"

    id                 = Column(Integer, primary_key=True, index=True)
    name               = Column(String(150), nullable=False)
    email              = Column(String(255), unique=True, nullable=False, index=True)
    # Empty string marks an account that only signs in through Google.
    passwordHash       = Column(String(255), nullable=False, default="")
    refreshToken       = Column(Text, nullable=True)
    refreshTokenExpiry = Column(TIMESTAMP(timezone=True), nullable=True)
    createdAt          = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    projects = relationship("Project", back_populates="user")
    tasks    = relationship("TaskItem", back_populates="user")

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
