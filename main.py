"""
LLM Relay - FastAPI application that relays chat conversations to a hosted LLM API.
Keeps the provider credential on the server and applies rate limiting and input bounds.
"""
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config, ConfigError
from models.chat_models import ErrorKind
from rate_limit import RateLimiter, RateLimitMiddleware
from routes import chat, feedback, health
from services.relay import UpstreamRelay
from services.validation import ConversationValidator
from utils.http_client import HTTPClientManager
from utils.logger import app_logger


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request model validation errors with a user-friendly message"""
    errors = exc.errors()
    app_logger.error(f"Validation error for {request.url.path}: {errors}")

    message = "Invalid request body"
    if errors:
        first_error = errors[0]
        field = first_error.get('loc', [])[-1] if first_error.get('loc') else 'field'
        message = f"{field}: {first_error.get('msg', 'Validation error')}"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler. Never exposes the exception to the caller."""
    app_logger.exception(f"Unhandled error on {request.url.path}: {type(exc).__name__}")
    return JSONResponse(
        status_code=ErrorKind.UNHANDLED.status_code,
        content={"error": ErrorKind.UNHANDLED.message},
    )


def log_startup(config: Config) -> None:
    app_logger.info("Server started")
    app_logger.info(f"Port: {config.PORT}")
    app_logger.info(f"Model: {config.MODEL}")
    app_logger.info(f"API key configured: {'yes' if config.ANTHROPIC_API_KEY else 'no'}")
    app_logger.info(f"Environment: {config.ENVIRONMENT}")


def create_app(config: Config, relay: Optional[UpstreamRelay] = None) -> FastAPI:
    """
    Build the application around an immutable configuration.

    Args:
        config: Process-wide configuration
        relay: Optional pre-built relay (tests inject one with a mock transport)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown events."""
        log_startup(config)
        yield
        app_logger.info("Shutting down, closing upstream connections")
        await HTTPClientManager.close_all()

    app = FastAPI(title=config.APP_TITLE, lifespan=lifespan)

    app.state.config = config
    app.state.relay = relay or UpstreamRelay(config)
    app.state.validator = ConversationValidator(config.MAX_MESSAGES)
    app.state.rate_limiter = RateLimiter(
        window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
        max_requests=config.RATE_LIMIT_MAX_REQUESTS,
    )

    # CORS must wrap the rate limiter; preflights are not counted
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.rate_limiter,
        trust_proxy=config.TRUST_PROXY,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.ALLOWED_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    #root endpoint
    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": "LLM Relay is running"}

    app.include_router(health.router, tags=["health"])
    app.include_router(chat.router, tags=["chat"])
    app.include_router(feedback.router, tags=["feedback"])

    return app


def load_config() -> Config:
    """Load configuration from the environment, exiting when the credential is missing."""
    config = Config.from_env()
    try:
        config.validate()
    except ConfigError as e:
        app_logger.critical(f"ERROR: {e}")
        sys.exit(1)
    return config


def app_factory() -> FastAPI:
    """Entry point for `uvicorn main:app_factory --factory`."""
    return create_app(load_config())


if __name__ == "__main__":
    import uvicorn
    config = load_config()
    uvicorn.run(create_app(config), host=config.HOST, port=config.PORT)
