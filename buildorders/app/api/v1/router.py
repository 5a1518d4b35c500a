from fastapi import APIRouter

from buildorders.app.api.v1.endpoints.health import router as health_router
from buildorders.app.api.v1.endpoints.projects import router as projects_router
from buildorders.app.api.v1.endpoints.orders import router as orders_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(projects_router, tags=["projects"])
router.include_router(orders_router, tags=["orders"])
