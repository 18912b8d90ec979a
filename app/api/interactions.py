"""
Discord interactions endpoint.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.config import Settings, get_settings
from app.dependencies import get_interaction_orchestrator
from app.models.interaction import Interaction, InteractionType
from app.services.interaction_orchestrator import (
    InteractionOrchestrator,
    UnsupportedInteractionError,
)
from app.utils.logging import get_logger
from app.utils.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_interaction_signature

logger = get_logger(__name__)

router = APIRouter(tags=["interactions"])


@router.post("/interactions")
async def handle_interaction(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    orchestrator: InteractionOrchestrator = Depends(get_interaction_orchestrator),
    x_signature_ed25519: Optional[str] = Header(None, alias=SIGNATURE_HEADER),
    x_signature_timestamp: Optional[str] = Header(None, alias=TIMESTAMP_HEADER),
) -> JSONResponse:
    """
    Receive an interaction from Discord.

    This endpoint:
    1. Verifies the Ed25519 signature over the raw body
    2. Parses the interaction envelope
    3. Answers inline, or acknowledges with a deferred response and
       continues the work in a background task

    Args:
        request: FastAPI request object
        background_tasks: FastAPI background tasks
        settings: Application settings
        orchestrator: Interaction dispatcher
        x_signature_ed25519: Signature header
        x_signature_timestamp: Signature timestamp header

    Returns:
        Interaction response envelope

    Raises:
        HTTPException: 500 when the service is not configured, 401 on a bad
            signature, 400 on an unusable payload
    """
    if not settings.discord_public_key:
        logger.error("DISCORD_PUBLIC_KEY is not configured")
        raise HTTPException(status_code=500, detail="Server configuration error")

    raw_body = await request.body()

    if not verify_interaction_signature(
        settings.discord_public_key,
        x_signature_ed25519,
        x_signature_timestamp,
        raw_body,
    ):
        logger.warning("Invalid interaction signature received")
        raise HTTPException(status_code=401, detail="Invalid request signature")

    try:
        interaction = Interaction.model_validate_json(raw_body)
    except ValidationError:
        logger.warning("Invalid interaction payload received")
        raise HTTPException(status_code=400, detail="Invalid interaction payload")

    if interaction.type != InteractionType.PING and not (
        settings.store_configured and settings.discord_application_id
    ):
        logger.error("Record store or Discord application is not configured")
        raise HTTPException(status_code=500, detail="Server configuration error")

    try:
        response = await orchestrator.handle(interaction, background_tasks)
    except UnsupportedInteractionError as e:
        logger.warning(str(e), extra={"interaction_type": interaction.type})
        raise HTTPException(status_code=400, detail="Unhandled interaction type")
    except Exception as e:
        logger.error(f"Error handling interaction: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return JSONResponse(content=response.to_wire())
