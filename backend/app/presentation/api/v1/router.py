"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from app.presentation.api.v1.endpoints.health import router as health_router
from app.presentation.api.v1.endpoints.admin_articles import router as admin_articles_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(admin_articles_router)
