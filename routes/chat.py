"""
Route handlers for chat operations.
Handles the /api/chat endpoint: validation, sanitization and the upstream relay.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from config import Config
from models.api_models import ChatResponse, ErrorResponse
from models.chat_models import ConversationValidationError, ErrorKind
from rate_limit import get_client_ip
from routes.dependencies import get_config, get_relay, get_validator
from services.relay import UpstreamRelay
from services.validation import ConversationValidator
from utils.logger import app_logger
from utils.metrics import RequestMetrics

router = APIRouter(prefix="/api")


def send_error(kind: ErrorKind, details: Optional[str] = None) -> JSONResponse:
    """Build the caller-facing error response for an error kind."""
    return JSONResponse(
        status_code=kind.status_code,
        content=ErrorResponse(error=kind.message, details=details).to_content(),
    )


async def read_json_body(request: Request):
    """Parsed JSON body, or None when the body is empty or not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    config: Config = Depends(get_config),
    relay: UpstreamRelay = Depends(get_relay),
    validator: ConversationValidator = Depends(get_validator),
):
    """
    Chat endpoint: validate the conversation, relay it upstream and normalize the reply.
    """
    client_ip = get_client_ip(request, config.TRUST_PROXY)

    with RequestMetrics(client_ip) as metrics:
        body = await read_json_body(request)
        messages = body.get("messages") if isinstance(body, dict) else None
        metrics.set_messages(messages)

        if messages is None:
            app_logger.warning(f"Chat request from {client_ip} without messages")
            return send_error(ErrorKind.MISSING_MESSAGES)

        try:
            validator.validate(messages)
        except ConversationValidationError as e:
            position = f" at message {e.index}" if e.index is not None else ""
            app_logger.warning(f"Validation error {e.kind.code}{position} from {client_ip}")
            return send_error(e.kind)

        result = await relay.relay(messages, body.get("systemPrompt"))

        if not result.ok:
            app_logger.error(f"Chat error {result.error.code} for {client_ip}")
            details = None
            if result.error is ErrorKind.UPSTREAM_UNAVAILABLE and config.is_development:
                details = result.detail
            return send_error(result.error, details)

        metrics.mark_success()
        return result.response
