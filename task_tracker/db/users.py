import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from task_tracker.core.security import hash_password
from task_tracker.db.models import UserDB

logger = logging.getLogger(__name__)


class DuplicateEmail(Exception):
    """Email уже занят (сравнение без учёта регистра)."""


def get_user(db: Session, user_id: int) -> Optional[UserDB]:
    return db.get(UserDB, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    return (
        db.query(UserDB)
        .filter(func.lower(UserDB.email) == email.strip().lower())
        .first()
    )


def create_user(db: Session, *, name: str, email: str, password: str) -> UserDB:
    user = UserDB(
        name=name,
        email=email.strip(),
        password_hash=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # гонка двух регистраций: уникальный индекс сработал уже в БД
        db.rollback()
        logger.info("Duplicate email rejected by unique index")
        raise DuplicateEmail(email) from exc
    db.refresh(user)
    return user
