"""API router aggregation."""

from fastapi import APIRouter

from attendance_recon.api.attendance import router as attendance_router
from attendance_recon.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
# Attendance reconciliation endpoints
api_router.include_router(attendance_router)
