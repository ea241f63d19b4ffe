"""
Data models for chat processing.
Contains the error taxonomy, validation errors and relay result structures.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.api_models import ChatResponse


class ErrorKind(Enum):
    """Caller-facing failure kinds with their HTTP status and message."""
    MISSING_MESSAGES = ("MissingMessages", 400, "Missing messages parameter")
    INVALID_FORMAT = ("InvalidFormat", 400, "Messages must be an array")
    EMPTY_CONVERSATION = ("EmptyConversation", 400, "Messages cannot be empty")
    TOO_MANY_MESSAGES = ("TooManyMessages", 400, "Too many messages in the conversation")
    MALFORMED_MESSAGE = ("MalformedMessage", 400, "Invalid message format")
    INVALID_ROLE = ("InvalidRole", 400, "Invalid message role")
    RATE_LIMITED = ("RateLimited", 429, "Too many requests, please try again in a few minutes")
    UPSTREAM_AUTH_ERROR = ("UpstreamAuthError", 500, "Error communicating with the AI service")
    UPSTREAM_RATE_LIMITED = ("UpstreamRateLimited", 429, "Too many requests to the AI service. Please try again shortly.")
    UPSTREAM_UNAVAILABLE = ("UpstreamUnavailable", 500, "Server error. Please try again shortly.")
    UNHANDLED = ("Unhandled", 500, "Internal server error")

    def __init__(self, code: str, status_code: int, message: str):
        self.code = code
        self.status_code = status_code
        self.message = message


class ConversationValidationError(ValueError):
    """Raised when a conversation fails validation."""

    def __init__(self, kind: ErrorKind, index: Optional[int] = None):
        self.kind = kind
        self.index = index
        super().__init__(kind.message)


class RelayOutcome(Enum):
    """How an upstream call ended."""
    SUCCESS = "success"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class RelayResult:
    """
    Result of a single upstream call.

    `detail` is for operators and development posture only. It is built from
    status codes, upstream error bodies and exception text, never from
    request headers, so it cannot carry the credential.
    """
    outcome: RelayOutcome
    response: Optional[ChatResponse] = None
    error: Optional[ErrorKind] = None
    status_code: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == RelayOutcome.SUCCESS

    @classmethod
    def success(cls, response: ChatResponse) -> "RelayResult":
        return cls(outcome=RelayOutcome.SUCCESS, response=response, status_code=200)

    @classmethod
    def upstream_error(cls, status_code: int, detail: str) -> "RelayResult":
        """Classify a non-2xx upstream status."""
        if status_code == 401:
            kind = ErrorKind.UPSTREAM_AUTH_ERROR
        elif status_code == 429:
            kind = ErrorKind.UPSTREAM_RATE_LIMITED
        else:
            kind = ErrorKind.UPSTREAM_UNAVAILABLE
        return cls(outcome=RelayOutcome.UPSTREAM_ERROR, error=kind, status_code=status_code, detail=detail)

    @classmethod
    def transport_error(cls, detail: str) -> "RelayResult":
        return cls(outcome=RelayOutcome.TRANSPORT_ERROR, error=ErrorKind.UPSTREAM_UNAVAILABLE, detail=detail)
