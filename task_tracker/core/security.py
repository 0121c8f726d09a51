from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from task_tracker.core.config import settings

logger = logging.getLogger(__name__)


# ====== хэширование паролей ======

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # битый/неизвестный хэш в БД считаем неверным паролем
        logger.warning("Stored password hash could not be parsed")
        return False


# ====== ошибки проверки токена ======

class TokenError(Exception):
    """Базовая ошибка проверки токена. Наружу запроса не выходит."""


class InvalidToken(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


class RevokedToken(TokenError):
    pass


# ====== список отозванных токенов ======

class InMemoryRevocationList:
    """
    Отозванные jti с TTL = оставшееся время жизни токена.
    После истечения TTL запись не нужна: токен и так просрочен.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: Dict[str, float] = {}  # jti -> expires_at
        self._lock = threading.Lock()

    def add(self, jti: str, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[jti] = self._clock() + ttl_seconds

    def contains(self, jti: str) -> bool:
        now = self._clock()
        with self._lock:
            self._purge(now)
            return jti in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._purge(self._clock())
            return len(self._entries)

    def _purge(self, now: float) -> None:
        expired = [jti for jti, expires_at in self._entries.items() if expires_at <= now]
        for jti in expired:
            del self._entries[jti]


# ====== JWT ======

REQUIRED_CLAIMS = ("iss", "iat", "nbf", "exp", "sub", "jti")


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_in: int
    jti: str


class TokenService:
    """
    Выдача, проверка и отзыв подписанных токенов сессии.

    Токен не хранится в БД: в нём iss/iat/nbf/exp/sub/jti,
    а отзыв (logout) работает через список отозванных jti.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl_minutes: int = 60,
        issuer: str = "task-tracker-api",
        revocation: Optional[InMemoryRevocationList] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_minutes * 60
        self.issuer = issuer
        self.revocation = revocation
        self._clock = clock

    @property
    def revocation_enabled(self) -> bool:
        return self.revocation is not None

    def issue(self, user_id: int) -> IssuedToken:
        now = int(self._clock())
        jti = uuid.uuid4().hex
        claims = {
            "iss": self.issuer,
            "iat": now,
            "nbf": now,
            "exp": now + self.ttl_seconds,
            "sub": str(user_id),
            "jti": jti,
        }
        token = jwt.encode(claims, self.secret, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_in=self.ttl_seconds, jti=jti)

    def decode(self, token: str) -> dict:
        """Подпись + обязательные claims + окно [nbf, exp]. Без списка отзыва."""
        options = {f"require_{claim}": True for claim in REQUIRED_CLAIMS}
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options=options,
            )
        except ExpiredSignatureError as exc:
            raise ExpiredToken("Token has expired") from exc
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc

    def verify(self, token: str) -> int:
        """Возвращает id пользователя или бросает TokenError."""
        if not token:
            raise InvalidToken("Empty token")

        payload = self.decode(token)

        try:
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken("Invalid subject claim") from exc

        if self.revocation is not None and self.revocation.contains(payload["jti"]):
            raise RevokedToken("Token has been revoked")

        return user_id

    def revoke(self, token: str) -> bool:
        """
        Кладёт jti в список отзыва до момента истечения токена.
        Возвращает False, если отзыв выключен.
        """
        payload = self.decode(token)
        if self.revocation is None:
            logger.info("Token revocation is disabled, logout keeps token %s valid", payload["jti"])
            return False

        remaining = int(payload["exp"]) - int(self._clock())
        self.revocation.add(payload["jti"], remaining)
        logger.info("Revoked token %s for user %s", payload["jti"], payload["sub"])
        return True


def build_token_service() -> TokenService:
    revocation = InMemoryRevocationList() if settings.REVOCATION_ENABLED else None
    return TokenService(
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        ttl_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        issuer=settings.TOKEN_ISSUER,
        revocation=revocation,
    )


token_service = build_token_service()
