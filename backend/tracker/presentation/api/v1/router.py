"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from tracker.presentation.api.v1.endpoints.health import router as health_router
from tracker.presentation.api.v1.endpoints.projects import router as projects_router
from tracker.presentation.api.v1.endpoints.tasks import router as tasks_router
from tracker.presentation.api.v1.query_controller import router as query_router
from tracker.presentation.api.v1.tools_controller import router as tools_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(projects_router)
router.include_router(tasks_router)
router.include_router(query_router)
router.include_router(tools_router)
