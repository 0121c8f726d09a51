from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Column, Integer, String, DateTime, Date,
    ForeignKey, Index, Text, Enum as SqlEnum, func
)
from sqlalchemy.orm import relationship

from task_tracker.db.session import Base


def utcnow() -> datetime:
    # храним naive UTC, как и раньше с datetime.utcnow()
    return datetime.now(timezone.utc).replace(tzinfo=None)


class _WireEnum(str, Enum):
    """Закрытый набор значений с явным отображением в строку API и обратно."""

    @classmethod
    def parse(cls, value: Optional[str]):
        """Строка из запроса -> член перечисления, или None для неизвестного значения."""
        if value is None:
            return None
        for member in cls:
            if member.value == value:
                return member
        return None


class TaskStatus(_WireEnum):
    todo = "todo"
    in_progress = "in_progress"
    done = "done"


class TaskPriority(_WireEnum):
    low = "low"
    medium = "medium"
    high = "high"


class UserDB(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tasks = relationship("TaskDB", back_populates="owner", cascade="all, delete-orphan")

    __table_args__ = (
        # уникальность email без учёта регистра — на уровне БД
        Index("uq_users_email_lower", func.lower(email), unique=True),
    )


class TaskDB(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SqlEnum(TaskStatus, name="task_status"),
        default=TaskStatus.todo,
        nullable=False,
    )
    priority = Column(
        SqlEnum(TaskPriority, name="task_priority"),
        default=TaskPriority.medium,
        nullable=False,
    )
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    owner = relationship("UserDB", back_populates="tasks")

    __table_args__ = (
        Index("ix_tasks_owner_status", "owner_id", "status"),
        Index("ix_tasks_owner_due_date", "owner_id", "due_date"),
        Index("ix_tasks_owner_created_at", "owner_id", "created_at"),
    )
