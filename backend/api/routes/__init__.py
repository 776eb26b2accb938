"""API Routes."""

from fastapi import APIRouter

from .health import router as health_router
from .stripe_webhook import router as stripe_webhook_router

# Create main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(stripe_webhook_router)
