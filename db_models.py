from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from db_config import Base


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    task_lists = relationship(
        "TaskList", back_populates="owner", cascade="all, delete-orphan"
    )
    shares = relationship(
        "TaskListShare", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class TaskList(Base):
    __tablename__ = "task_lists"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    owner_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="task_lists")
    tasks = relationship(
        "Task",
        back_populates="task_list",
        cascade="all, delete-orphan",
        order_by=lambda: (Task.created_at.desc(), Task.id.desc()),
    )
    shares = relationship(
        "TaskListShare",
        back_populates="task_list",
        cascade="all, delete-orphan",
        order_by=lambda: (TaskListShare.created_at.desc(), TaskListShare.id.desc()),
    )

    def __repr__(self):
        return f"<TaskList(id={self.id}, title={self.title[:30]}, owner={self.owner_id})>"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    status = Column(String(20), default=TaskStatus.PENDING.value, nullable=False)
    task_list_id = Column(
        Integer,
        ForeignKey("task_lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    task_list = relationship("TaskList", back_populates="tasks")

    def __repr__(self):
        return f"<Task(id={self.id}, title={self.title[:30]}, list={self.task_list_id}, status={self.status})>"


class TaskListShare(Base):
    __tablename__ = "task_list_shares"

    id = Column(Integer, primary_key=True, index=True)
    task_list_id = Column(
        Integer, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    permission = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    task_list = relationship("TaskList", back_populates="shares")
    user = relationship("User", back_populates="shares")

    # Unique constraint: Can't share the same list with the same user twice
    __table_args__ = (
        UniqueConstraint("task_list_id", "user_id", name="unique_task_list_share"),
    )

    def __repr__(self):
        return f"<TaskListShare(list={self.task_list_id}, user={self.user_id}, permission={self.permission})>"
