# /intake_bot/routes/public.py

from datetime import datetime, timezone
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from intake_bot.config.settings import settings

# This file defines public-facing endpoints that do not require authentication,
# such as health checks, the root endpoint and Prometheus metrics.

router = APIRouter()

@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "VITIM Telegram intake bot",
        "version": "1.0.0",
        "status": "operational",
        "delivery_mode": settings.telegram_delivery_mode,
        "environment": settings.environment
    }

@router.get("/health", summary="Basic Health Check")
async def health_check(request: Request):
    """Basic health check, including the number of chats with an unfinished flow."""
    engine = getattr(request.app.state, "dialog_engine", None)
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "active_conversations": len(engine.store) if engine else 0,
        "pending_submissions": engine.pending_submissions if engine else 0
    }

@router.get("/health/live", summary="Liveness Probe")
async def liveness_check():
    """Kubernetes/Docker liveness probe."""
    return {"status": "alive"}

@router.get("/metrics", tags=["Monitoring"])
async def metrics():
    """Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)
