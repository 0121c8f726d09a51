import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    POSTGRES_USER: str = os.getenv("POSTGRES_USER")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB")

    @property
    def DATABASE_URL(self) -> str:
        # явный DATABASE_URL важнее, потом Postgres из POSTGRES_*, иначе локальная SQLite
        url = os.getenv("DATABASE_URL")
        if url:
            return url
        if self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB:
            return (
                f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )
        return "sqlite:///./task_tracker.db"

    # ====== JWT ======
    SECRET_KEY: str = os.getenv("JWT_SECRET")
    ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_TTL", "60"))
    TOKEN_ISSUER: str = os.getenv("JWT_ISSUER", "task-tracker-api")
    REVOCATION_ENABLED: bool = _env_bool("JWT_BLACKLIST_ENABLED", True)

    # ====== прочее ======
    AUTH_RATE_LIMIT: int = int(os.getenv("AUTH_RATE_LIMIT", "10"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def CORS_ORIGINS(self) -> List[str]:
        raw = os.getenv("CORS_ORIGINS", "*")
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    def __init__(self):
        # Проверяем наличие обязательных переменных
        required_vars = {"SECRET_KEY": "JWT_SECRET"}
        missing = [env for attr, env in required_vars.items() if not getattr(self, attr)]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


settings = Settings()
