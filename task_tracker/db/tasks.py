"""
Хранилище задач.

Каждый запрос списка фильтруется по владельцу прямо в SQL,
поэтому чужие строки не могут попасть в выборку.
"""
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from task_tracker.db.models import TaskDB, TaskPriority, TaskStatus, utcnow

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100

# поля, которые клиент может менять; owner_id сюда не входит
WRITABLE_FIELDS = ("title", "description", "status", "priority", "due_date")


@dataclass(frozen=True)
class TaskFilters:
    """Фильтры по точному совпадению. Неизвестное значение даёт пустой результат."""

    status: Optional[str] = None
    priority: Optional[str] = None


@dataclass
class Page:
    items: List[TaskDB]
    current_page: int
    per_page: int
    total: int

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)


def normalize_per_page(value: Any) -> int:
    """0, отрицательное или не число -> по умолчанию; больше лимита -> обрезаем до лимита."""
    try:
        per_page = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PER_PAGE
    if per_page <= 0:
        return DEFAULT_PER_PAGE
    return min(per_page, MAX_PER_PAGE)


def normalize_page(value: Any) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def list_tasks(
    db: Session,
    owner_id: int,
    filters: TaskFilters = TaskFilters(),
    page: Any = 1,
    per_page: Any = DEFAULT_PER_PAGE,
) -> Page:
    page = normalize_page(page)
    per_page = normalize_per_page(per_page)

    q = db.query(TaskDB).filter(TaskDB.owner_id == owner_id)

    if filters.status is not None:
        status = TaskStatus.parse(filters.status)
        if status is None:
            return Page(items=[], current_page=page, per_page=per_page, total=0)
        q = q.filter(TaskDB.status == status)

    if filters.priority is not None:
        priority = TaskPriority.parse(filters.priority)
        if priority is None:
            return Page(items=[], current_page=page, per_page=per_page, total=0)
        q = q.filter(TaskDB.priority == priority)

    total = q.count()
    offset = (page - 1) * per_page
    # страница за пределами выборки: пусто, в БД смещение не отправляем (может не влезть в INTEGER)
    if offset >= total:
        return Page(items=[], current_page=page, per_page=per_page, total=total)

    items = (
        q.order_by(TaskDB.created_at.desc(), TaskDB.id.desc())
         .limit(per_page)
         .offset(offset)
         .all()
    )
    return Page(items=items, current_page=page, per_page=per_page, total=total)


def create_task(db: Session, owner_id: int, fields: Mapping[str, Any]) -> TaskDB:
    data = {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
    task = TaskDB(owner_id=owner_id, **data)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def get_task(db: Session, task_id: int) -> Optional[TaskDB]:
    return db.get(TaskDB, task_id)


def update_task(db: Session, task: TaskDB, fields: Mapping[str, Any]) -> TaskDB:
    for name, value in fields.items():
        if name in WRITABLE_FIELDS:
            setattr(task, name, value)

    task.updated_at = utcnow()

    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task: TaskDB) -> None:
    db.delete(task)
    db.commit()
