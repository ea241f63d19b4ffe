"""
Models package exports.
"""
from models.api_models import (
    Message,
    UpstreamRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    FeedbackRequest,
)
from models.chat_models import ErrorKind, ConversationValidationError, RelayOutcome, RelayResult

__all__ = [
    'Message',
    'UpstreamRequest',
    'ChatResponse',
    'ErrorResponse',
    'HealthResponse',
    'FeedbackRequest',
    'ErrorKind',
    'ConversationValidationError',
    'RelayOutcome',
    'RelayResult',
]
