# tests/test_task_repository.py

from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy.orm import Session

from task_tracker.core.security import hash_password
from task_tracker.db import tasks as task_repo
from task_tracker.db import users as user_repo
from task_tracker.db.models import TaskDB, TaskPriority, TaskStatus, UserDB


@pytest.fixture()
def owners(db: Session) -> tuple[int, int]:
    a = UserDB(name="A", email="a@example.com", password_hash=hash_password("password123"))
    b = UserDB(name="B", email="b@example.com", password_hash=hash_password("password123"))
    db.add_all([a, b])
    db.commit()
    return a.id, b.id


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 15), ("abc", 15), (0, 15), (-3, 15), (1, 1), ("40", 40), (100, 100), (1000, 100)],
)
def test_normalize_per_page(raw, expected: int) -> None:
    assert task_repo.normalize_per_page(raw) == expected


@pytest.mark.parametrize("raw, expected", [(None, 1), ("x", 1), (0, 1), (-2, 1), ("3", 3)])
def test_normalize_page(raw, expected: int) -> None:
    assert task_repo.normalize_page(raw) == expected


def test_list_never_returns_other_owners_rows(db: Session, owners) -> None:
    a, b = owners
    for _ in range(2):
        task_repo.create_task(db, a, {"title": "mine"})
    for _ in range(3):
        task_repo.create_task(db, b, {"title": "theirs"})

    page = task_repo.list_tasks(db, a)

    assert page.total == 2
    assert {t.owner_id for t in page.items} == {a}


def test_list_orders_by_created_at_then_id_desc(db: Session, owners) -> None:
    a, _ = owners
    same = datetime(2026, 1, 1, 12, 0, 0)
    older = datetime(2025, 1, 1, 12, 0, 0)
    db.add_all([
        TaskDB(owner_id=a, title="old", created_at=older, updated_at=older),
        TaskDB(owner_id=a, title="tie-1", created_at=same, updated_at=same),
        TaskDB(owner_id=a, title="tie-2", created_at=same, updated_at=same),
    ])
    db.commit()

    titles = [t.title for t in task_repo.list_tasks(db, a).items]

    assert titles == ["tie-2", "tie-1", "old"]


def test_list_filters_are_exact_and_composable(db: Session, owners) -> None:
    a, _ = owners
    task_repo.create_task(db, a, {"title": "1", "status": TaskStatus.done, "priority": TaskPriority.high})
    task_repo.create_task(db, a, {"title": "2", "status": TaskStatus.done, "priority": TaskPriority.low})
    task_repo.create_task(db, a, {"title": "3", "status": TaskStatus.in_progress})

    done = task_repo.list_tasks(db, a, task_repo.TaskFilters(status="done"))
    done_high = task_repo.list_tasks(db, a, task_repo.TaskFilters(status="done", priority="high"))
    unknown = task_repo.list_tasks(db, a, task_repo.TaskFilters(status="DONE"))

    assert done.total == 2
    assert [t.title for t in done_high.items] == ["1"]
    assert unknown.total == 0
    assert unknown.items == []


def test_page_metadata(db: Session, owners) -> None:
    a, _ = owners
    for i in range(7):
        task_repo.create_task(db, a, {"title": str(i)})

    page = task_repo.list_tasks(db, a, page=3, per_page=3)
    beyond = task_repo.list_tasks(db, a, page=9, per_page=3)

    assert (page.total, page.last_page, len(page.items)) == (7, 3, 1)
    assert (beyond.total, beyond.last_page, beyond.items) == (7, 3, [])


def test_page_far_beyond_last_is_empty(db: Session, owners) -> None:
    a, _ = owners
    task_repo.create_task(db, a, {"title": "only"})

    page = task_repo.list_tasks(db, a, page=10 ** 20, per_page=100)

    assert page.items == []
    assert (page.current_page, page.total, page.last_page) == (10 ** 20, 1, 1)


def test_create_forces_owner_and_drops_unknown_fields(db: Session, owners) -> None:
    a, b = owners

    task = task_repo.create_task(db, a, {"title": "t", "owner_id": b, "id": 999})

    assert task.owner_id == a
    assert task.id != 999
    assert task.status is TaskStatus.todo
    assert task.priority is TaskPriority.medium


def test_update_changes_only_given_fields_and_touches_updated_at(db: Session, owners) -> None:
    a, _ = owners
    task = task_repo.create_task(
        db, a, {"title": "t", "description": "d", "due_date": date(2026, 5, 1)},
    )
    stale = datetime(2000, 1, 1)
    task.updated_at = stale
    db.commit()

    updated = task_repo.update_task(db, task, {"status": TaskStatus.done, "owner_id": 12345})

    assert updated.status is TaskStatus.done
    assert updated.title == "t"
    assert updated.description == "d"
    assert updated.due_date == date(2026, 5, 1)
    assert updated.owner_id == a
    assert updated.updated_at > stale


def test_get_and_delete(db: Session, owners) -> None:
    a, _ = owners
    task = task_repo.create_task(db, a, {"title": "bye"})
    task_id = task.id

    assert task_repo.get_task(db, task_id) is task
    task_repo.delete_task(db, task)
    assert task_repo.get_task(db, task_id) is None


def test_user_email_lookup_is_case_insensitive(db: Session, owners) -> None:
    assert user_repo.get_user_by_email(db, "A@EXAMPLE.COM").name == "A"
    assert user_repo.get_user_by_email(db, "missing@example.com") is None


def test_unique_index_rejects_duplicate_email_in_other_case(db: Session, owners) -> None:
    with pytest.raises(user_repo.DuplicateEmail):
        user_repo.create_user(db, name="Dup", email="B@Example.com", password="password123")
