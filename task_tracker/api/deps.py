import logging
from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from task_tracker.core.config import settings
from task_tracker.core.errors import NotFound, Unauthenticated
from task_tracker.core.rate_limit import RateLimiter
from task_tracker.core.security import TokenError, TokenService, token_service
from task_tracker.db import tasks as task_repo
from task_tracker.db import users as user_repo
from task_tracker.db.models import TaskDB, UserDB
from task_tracker.db.session import SessionLocal

logger = logging.getLogger(__name__)

# auto_error=False: без заголовка отвечаем своим 401, а не 403 от FastAPI
security = HTTPBearer(auto_error=False)

auth_rate_limit = RateLimiter(settings.AUTH_RATE_LIMIT, 60, scope="auth")

# первичные ключи — знаковый 64-битный INTEGER
MAX_ROW_ID = 2 ** 63 - 1


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_service() -> TokenService:
    return token_service


@dataclass(frozen=True)
class Principal:
    """Аутентифицированный пользователь запроса и токен, которым он вошёл."""

    id: int
    user: UserDB
    token: str


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """
    Берём токен из стандартной схемы HTTP Bearer.
    Любая ошибка проверки токена -> 401, дальше запрос не идёт.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    token = credentials.credentials
    try:
        user_id = tokens.verify(token)
    except TokenError as exc:
        logger.info("Rejected bearer token: %s", exc.__class__.__name__)
        raise Unauthenticated() from exc

    user = user_repo.get_user(db, user_id)
    if user is None:
        logger.info("Token subject %s no longer exists", user_id)
        raise Unauthenticated()

    return Principal(id=user.id, user=user, token=token)


def authorize_ownership(principal: Principal, task: Optional[TaskDB]) -> TaskDB:
    """Чужая задача неотличима от несуществующей: в обоих случаях 404."""
    if task is None or task.owner_id != principal.id:
        raise NotFound()
    return task


def get_owned_task(db: Session, principal: Principal, task_id: Union[int, str]) -> TaskDB:
    """Явная замена route-model binding: найти по id, затем проверить владельца."""
    try:
        task_id = int(task_id)
    except (TypeError, ValueError):
        # нечисловой id не может существовать
        raise NotFound()
    if not 1 <= task_id <= MAX_ROW_ID:
        raise NotFound()
    return authorize_ownership(principal, task_repo.get_task(db, task_id))
