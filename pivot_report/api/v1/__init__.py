"""
API v1 — Router aggregation.
"""

from fastapi import APIRouter

from pivot_report.api.v1.acquisition import router as acquisition_router
from pivot_report.api.v1.system import router as system_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(system_router)
api_router.include_router(acquisition_router)
