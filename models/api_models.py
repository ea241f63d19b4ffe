"""
Pydantic data models for API requests and responses.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """Chat message model."""
    role: Literal["user", "assistant"]
    content: str


class UpstreamRequest(BaseModel):
    """Request body for the Anthropic Messages API."""
    model: str
    max_tokens: int
    messages: List[Message]
    system: Optional[str] = None

    def to_payload(self) -> dict:
        """Serialize for the wire, leaving out `system` when it is not set."""
        return self.model_dump(exclude_none=True)


class ChatResponse(BaseModel):
    """Successful chat response returned to the caller."""
    success: bool = True
    message: str
    usage: Dict[str, Any] = Field(default_factory=dict)
    model: str


class ErrorResponse(BaseModel):
    """Error body returned to the caller."""
    error: str
    details: Optional[str] = None

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    timestamp: str
    model: str


class FeedbackRequest(BaseModel):
    """Feedback about a generated message. Logged only, never stored."""
    model_config = ConfigDict(populate_by_name=True)

    message_id: Optional[Any] = Field(None, alias="messageId")
    rating: Optional[Any] = None
    comment: Optional[Any] = None
