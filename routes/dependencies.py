"""
Request-scoped accessors for objects built once by the app factory.
"""
from fastapi import Request

from config import Config
from services.relay import UpstreamRelay
from services.validation import ConversationValidator


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_relay(request: Request) -> UpstreamRelay:
    return request.app.state.relay


def get_validator(request: Request) -> ConversationValidator:
    return request.app.state.validator
