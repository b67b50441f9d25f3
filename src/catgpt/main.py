"""Main FastAPI application for CatGPT."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .chat.generator import response_generator
from .chat.store import conversation_store
from .chat.websocket import router as chat_router
from .config import settings

# Configure logging with production settings
log_level = getattr(logging, settings.log_level, logging.INFO)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)

# Create rate limiter
limiter = Limiter(key_func=get_remote_address)


def validate_startup_config() -> None:
    """Validate configuration at startup."""
    logger.info(f"Starting CatGPT in {settings.environment} environment")

    # Validate production configuration
    if settings.is_production():
        logger.info("Running production configuration validation...")
        errors = settings.validate_production_config()
        if errors:
            logger.error("Production configuration errors:")
            for error in errors:
                logger.error(f"  - {error}")
            sys.exit(1)
        logger.info("Production configuration validation passed")
    else:
        logger.warning(f"Running in {settings.environment} mode - not for production use")

    logger.info(f"Server configuration: {settings.host}:{settings.port}")
    logger.info(f"Max conversations: {settings.max_conversations}")
    logger.info(f"Conversation TTL: {settings.conversation_ttl_hours}h")
    logger.info(f"Token delay range: {settings.min_delay_ms}-{settings.max_delay_ms}ms")
    logger.info(f"Stream delay scale: {settings.stream_delay_scale}")
    logger.info(f"Debug mode: {settings.debug}")

    if settings.complexity_overrides_file:
        logger.info(f"✅ Complexity overrides loaded from {settings.complexity_overrides_file}")
    else:
        logger.info("Using default complexity configuration")

    if settings.random_seed is not None:
        logger.warning("⚠️ Random seed configured - replies are deterministic")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan management."""
    logger.info("CatGPT starting up...")
    validate_startup_config()
    logger.info("CatGPT startup complete")

    yield

    logger.info("CatGPT shutting down...")
    stats = conversation_store.get_memory_stats()
    logger.info(
        f"Dropping {stats['active_conversations']} conversations "
        f"({stats['total_messages']} messages)"
    )
    logger.info(f"Generation stats: {response_generator.get_usage_stats()}")
    logger.info("CatGPT shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="CatGPT",
    description="Chat with a cat that answers in streamed meows",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

# Include routers
app.include_router(chat_router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with basic service information."""
    return {
        "message": "CatGPT is running",
        "version": "0.1.0",
        "environment": settings.environment,
        "status": "healthy",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "catgpt"}


def run() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "catgpt.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
