"""
Feedback route. Logs what the client sends; nothing is stored.
"""
from typing import Optional

from fastapi import APIRouter

from models.api_models import FeedbackRequest
from utils.logger import app_logger

router = APIRouter(prefix="/api")


@router.post("/feedback")
async def feedback(payload: Optional[FeedbackRequest] = None):
    """Accept feedback about a message."""
    payload = payload or FeedbackRequest()
    app_logger.info(
        f"Feedback received: messageId={payload.message_id!r}, "
        f"rating={payload.rating!r}, comment={payload.comment!r}"
    )
    return {"success": True}
