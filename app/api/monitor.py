"""
Scheduled notification endpoint.

Called by an external scheduler (cron) to announce pending errors.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.config import Settings, get_settings
from app.dependencies import get_notification_batcher
from app.models.api_response import BatchReport
from app.services.notification_batcher import NotificationBatcher
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["monitor"])


@router.api_route(
    "/monitor-errors",
    methods=["GET", "POST"],
    response_model=BatchReport,
    response_model_exclude_none=True,
)
async def monitor_errors(
    settings: Settings = Depends(get_settings),
    batcher: NotificationBatcher = Depends(get_notification_batcher),
) -> BatchReport:
    """
    Announce every pending error, grouped by business day.

    Returns:
        {"reported": [{"date", "count"}]} or {"message": "no pending errors"}

    Raises:
        HTTPException: 500 when the record store or Discord is not configured
    """
    if not settings.store_configured or not settings.chat_configured:
        logger.error("Record store or Discord bot is not configured")
        raise HTTPException(status_code=500, detail="Server configuration error")

    return await batcher.run()
