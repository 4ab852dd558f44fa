"""
Metrics Endpoints

Delivery queue statistics for observability.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from message_relay.message_queue import DeliveryQueue

router = APIRouter(tags=["Metrics"])


@router.get("/metrics/queue")
async def queue_metrics(request: Request):
    """
    Get delivery queue status.

    Returns:
        Pending message count and whether a drain pass is active
    """
    try:
        queue: DeliveryQueue = request.app.state.queue
        queue_status = queue.status()

        return {
            "status": "ok",
            "metrics": queue_status.model_dump()
        }

    except Exception as e:
        logger.opt(exception=True).error("Failed to get queue metrics: {}", e)
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": str(e)
            }
        )
