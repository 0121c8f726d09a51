from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from task_tracker.db.models import TaskStatus, TaskPriority

TITLE_MAX_LENGTH = 255


def _clean_title(value: Optional[str]) -> str:
    if value is None:
        raise ValueError("The title field is required.")
    value = value.strip()
    if not value:
        raise ValueError("The title field is required.")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"The title field must not be greater than {TITLE_MAX_LENGTH} characters.")
    return value


class TaskCreate(BaseModel):
    # обязательное, но null пропускаем до валидатора: ответ как на пустую строку
    title: Optional[str]
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> str:
        return _clean_title(value)


class TaskUpdate(BaseModel):
    """
    Частичное обновление: меняются только переданные поля
    (см. model_dump(exclude_unset=True)).
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> str:
        return _clean_title(value)

    @field_validator("status", "priority")
    @classmethod
    def not_null(cls, value, info):
        # явный null для status/priority недопустим, description/due_date можно очистить
        if value is None:
            raise ValueError(f"The {info.field_name} field must not be null.")
        return value


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskPage(BaseModel):
    data: List[TaskOut]
    current_page: int
    last_page: int
    per_page: int
    total: int
