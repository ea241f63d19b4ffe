"""
Upstream relay service.
Builds the Anthropic Messages API request, performs the call and classifies the outcome.
"""
import json
from typing import Optional

import httpx

from config import Config
from models.api_models import ChatResponse, Message, UpstreamRequest
from models.chat_models import RelayResult
from utils.http_client import HTTPClientManager
from utils.logger import app_logger
from utils.sanitizer import sanitize_input


class UpstreamRelay:
    """Relays validated conversations to the upstream LLM provider."""

    # Max characters of an upstream error body kept in logs and details
    ERROR_BODY_LIMIT = 500

    def __init__(self, config: Config, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Injected client, or the shared pooled one."""
        if self._client is not None:
            return self._client
        return HTTPClientManager.get_upstream_client(self.config)

    def build_request(self, messages: list, system_prompt=None) -> UpstreamRequest:
        """
        Build the provider payload from a validated conversation.

        Model and token ceiling always come from configuration. Each message
        content is sanitized, order is preserved, and `system` is set (sanitized,
        possibly to "") whenever a truthy system prompt was supplied.
        """
        max_length = self.config.MAX_INPUT_LENGTH
        sanitized_messages = [
            Message(role=msg["role"], content=sanitize_input(msg.get("content"), max_length))
            for msg in messages
        ]

        system = sanitize_input(system_prompt, max_length) if system_prompt else None

        return UpstreamRequest(
            model=self.config.MODEL,
            max_tokens=self.config.MAX_TOKENS,
            messages=sanitized_messages,
            system=system,
        )

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.config.ANTHROPIC_API_KEY,
            "anthropic-version": self.config.ANTHROPIC_VERSION,
        }

    async def send(self, upstream_request: UpstreamRequest) -> RelayResult:
        """
        Perform a single upstream call. Never retries and never raises for
        transport or upstream failures; those come back as a RelayResult.
        """
        payload = upstream_request.to_payload()
        app_logger.info(
            f"Upstream call: model={payload['model']}, messages={len(payload['messages'])}, "
            f"system={'system' in payload}"
        )

        try:
            response = await self.client.post(
                self.config.ANTHROPIC_API_URL,
                json=payload,
                headers=self._headers(),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            detail = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            app_logger.error(f"Upstream transport error: {detail}")
            return RelayResult.transport_error(detail)

        if not response.is_success:
            detail = f"API Error: {response.status_code} - {self._error_body(response)}"
            app_logger.error(f"Upstream error: {detail}")
            return RelayResult.upstream_error(response.status_code, detail)

        return self._parse_success(response)

    async def relay(self, messages: list, system_prompt=None) -> RelayResult:
        """Build the provider request for a conversation and send it."""
        return await self.send(self.build_request(messages, system_prompt))

    def _parse_success(self, response: httpx.Response) -> RelayResult:
        """Extract text, usage and model from a 2xx body."""
        try:
            data = response.json()
            chat_response = ChatResponse(
                message=data["content"][0]["text"],
                usage=data.get("usage") or {},
                model=data["model"],
            )
        except (ValueError, KeyError, IndexError, TypeError) as e:
            detail = f"Unexpected upstream response: {type(e).__name__}: {e}"
            app_logger.error(detail)
            return RelayResult.transport_error(detail)

        app_logger.info(f"Upstream call completed: {len(chat_response.message)} characters from {chat_response.model}")
        return RelayResult.success(chat_response)

    def _error_body(self, response: httpx.Response) -> str:
        try:
            body = json.dumps(response.json())
        except ValueError:
            body = response.text
        return body[:self.ERROR_BODY_LIMIT]
