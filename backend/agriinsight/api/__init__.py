"""API router aggregator."""
from fastapi import APIRouter

from agriinsight.api.routes import auth, dashboard, health

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(dashboard.router)
api_router.include_router(health.router)

__all__ = ["api_router"]
