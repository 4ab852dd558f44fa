"""
Health and Readiness Endpoints

Probes for load balancers and orchestration.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": reason}
    )


@router.get("/health")
async def health_check():
    """Liveness: 200 whenever the process is serving."""
    return {
        "status": "healthy",
        "service": "message-relay",
        "version": API_VERSION
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe.

    Ready means the delivery queue accepts work and MongoDB answers a
    ping. A halted queue with pending inbound messages is still ready;
    the backlog is reported so it shows up on dashboards.
    """
    queue = getattr(request.app.state, "queue", None)
    if queue is None or not queue.running:
        return _not_ready("Delivery queue not running")

    try:
        await request.app.state.db_manager.ping()
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return _not_ready(f"MongoDB unreachable: {e}")

    return {
        "status": "ready",
        "mongodb": "connected",
        "queue": "running",
        "pending": queue.status().pending_count,
    }


@router.get("/")
async def root():
    """Service info and route map."""
    return {
        "service": "Message Relay API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "queue_metrics": "/metrics/queue",
            "send_sms": "/api/messages/sms (POST)",
            "send_email": "/api/messages/email (POST)",
            "sms_webhook": "/api/webhooks/sms (POST)",
            "email_webhook": "/api/webhooks/email (POST)",
            "conversations": "/api/conversations"
        }
    }
