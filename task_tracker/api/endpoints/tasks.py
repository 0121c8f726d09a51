from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from task_tracker.api import deps
from task_tracker.db import tasks as task_repo
from task_tracker.schemas.tasks import TaskCreate, TaskOut, TaskPage, TaskUpdate

router = APIRouter(tags=["tasks"], prefix="/tasks")


@router.get("", response_model=TaskPage)
def list_tasks(
    page: Optional[str] = None,
    per_page: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    principal: deps.Principal = Depends(deps.get_current_principal),
):
    # page/per_page принимаем строками: мусор не ошибка, а значение по умолчанию
    result = task_repo.list_tasks(
        db,
        principal.id,
        task_repo.TaskFilters(status=status_filter or None, priority=priority or None),
        page=page,
        per_page=per_page,
    )
    return {
        "data": result.items,
        "current_page": result.current_page,
        "last_page": result.last_page,
        "per_page": result.per_page,
        "total": result.total,
    }


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(deps.get_db),
    principal: deps.Principal = Depends(deps.get_current_principal),
):
    # владелец всегда из токена, owner_id из тела игнорируется схемой
    return task_repo.create_task(db, principal.id, task_in.model_dump())


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: str,
    db: Session = Depends(deps.get_db),
    principal: deps.Principal = Depends(deps.get_current_principal),
):
    return deps.get_owned_task(db, principal, task_id)


@router.put("/{task_id}", response_model=TaskOut)
@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    task_in: TaskUpdate,
    db: Session = Depends(deps.get_db),
    principal: deps.Principal = Depends(deps.get_current_principal),
):
    task = deps.get_owned_task(db, principal, task_id)
    return task_repo.update_task(db, task, task_in.model_dump(exclude_unset=True))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_task(
    task_id: str,
    db: Session = Depends(deps.get_db),
    principal: deps.Principal = Depends(deps.get_current_principal),
):
    task = deps.get_owned_task(db, principal, task_id)
    task_repo.delete_task(db, task)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
