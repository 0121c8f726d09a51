import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from task_tracker.api import router as api_router
from task_tracker.core.config import settings
from task_tracker.core.errors import register_exception_handlers
from task_tracker.core.logging import setup_logging
from task_tracker.db.session import Base, engine

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Task Tracker API",
    version="1.0.0",
    description="Личные задачи пользователей с JWT-аутентификацией",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def add_rate_limit_headers(request: Request, call_next):
    response = await call_next(request)
    if hasattr(request.state, "x_limit_remaining"):
        response.headers["X-Limit-Remaining"] = str(request.state.x_limit_remaining)
    if hasattr(request.state, "retry_after") and request.state.retry_after:
        response.headers["Retry-After"] = str(request.state.retry_after)
    return response


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}


app.include_router(api_router)


def run() -> None:
    import uvicorn

    uvicorn.run("task_tracker.main:app", host="0.0.0.0", port=8000)
