from typing import Any, Dict, List, Mapping

from pydantic import ValidationError
from sqlalchemy.orm import Session

from task_tracker.core.errors import ValidationFailed, field_errors
from task_tracker.db import users as user_repo
from task_tracker.schemas.users import UserCreate

EMAIL_TAKEN = "The email has already been taken."
PASSWORD_MISMATCH = "The password field confirmation does not match."


def add_error(errors: Dict[str, List[str]], name: str, message: str) -> None:
    messages = errors.setdefault(name, [])
    if message not in messages:
        messages.append(message)


def validate_registration(db: Session, payload: Mapping[str, Any]) -> UserCreate:
    """
    Все правила регистрации разом: схема, подтверждение пароля, уникальность email.
    Ошибки по всем полям собираются в один ответ 422, а не только первая.
    """
    data = None
    errors: Dict[str, List[str]] = {}
    try:
        data = UserCreate.model_validate(payload)
    except ValidationError as exc:
        errors = field_errors(exc.errors())

    password = payload.get("password")
    if isinstance(password, str) and payload.get("password_confirmation") != password:
        add_error(errors, "password", PASSWORD_MISMATCH)

    email = payload.get("email")
    if isinstance(email, str) and "email" not in errors and user_repo.get_user_by_email(db, email):
        add_error(errors, "email", EMAIL_TAKEN)

    if errors:
        raise ValidationFailed(errors=errors)
    return data
