"""
Conversation validation.
Checks the raw `messages` value of a chat request before anything is sent upstream.
"""
from typing import Any

from models.chat_models import ConversationValidationError, ErrorKind

MAX_MESSAGES = 50
ALLOWED_ROLES = ("user", "assistant")


class ConversationValidator:
    """Validates the shape and roles of a conversation."""

    def __init__(self, max_messages: int = MAX_MESSAGES):
        self.max_messages = max_messages

    def validate(self, messages: Any) -> list:
        """
        Validate a raw conversation, failing on the first problem found.

        Checks run in order: list type, non-empty, length cap, then per message
        (in index order) presence of a truthy role and content followed by the
        role whitelist.

        Returns:
            The conversation unchanged, in its original order

        Raises:
            ConversationValidationError: with the kind of the first failure
        """
        if not isinstance(messages, list):
            raise ConversationValidationError(ErrorKind.INVALID_FORMAT)

        if not messages:
            raise ConversationValidationError(ErrorKind.EMPTY_CONVERSATION)

        if len(messages) > self.max_messages:
            raise ConversationValidationError(ErrorKind.TOO_MANY_MESSAGES)

        for index, message in enumerate(messages):
            if not isinstance(message, dict) or not message.get("role") or not message.get("content"):
                raise ConversationValidationError(ErrorKind.MALFORMED_MESSAGE, index)
            if message["role"] not in ALLOWED_ROLES:
                raise ConversationValidationError(ErrorKind.INVALID_ROLE, index)

        return messages
