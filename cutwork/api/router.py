"""Top-level API router."""

from fastapi import APIRouter

from cutwork.api.routes.assignments import router as assignments_router
from cutwork.api.routes.categories import router as categories_router
from cutwork.api.routes.cuts import router as cuts_router
from cutwork.api.routes.employees import router as employees_router
from cutwork.api.routes.exports import router as exports_router
from cutwork.api.routes.health import router as health_router
from cutwork.api.routes.reports import router as reports_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(categories_router)
api_router.include_router(employees_router)
api_router.include_router(cuts_router)
api_router.include_router(assignments_router)
api_router.include_router(reports_router)
api_router.include_router(exports_router)
