from fastapi import APIRouter

from task_tracker.api.endpoints import auth, tasks

router = APIRouter()

router.include_router(auth.router)
router.include_router(tasks.router)
