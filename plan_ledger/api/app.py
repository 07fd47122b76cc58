"""FastAPI application factory."""

import json
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plan_ledger import __version__
from plan_ledger.constants import DEFAULT_API_PREFIX, DOCS_URL, OPENAPI_URL, REDOC_URL

from .middleware import add_middleware, register_exception_handlers
from .routers import health_router, plan_router

logger = logging.getLogger(__name__)

# =============================================================================
# OpenAPI Configuration
# =============================================================================

OPENAPI_TAGS = [
    {
        "name": "Health",
        "description": "Service health checks and status endpoints",
    },
    {
        "name": "Plan",
        "description": "Pay-as-you-go plans: usage overview, plan status, provisioning and charge-ups",
    },
]

API_DESCRIPTION = """
Pay-as-you-go billing ledger for a chat assistant.

Every paid action (chat, image generation, image description, video,
summaries) is deducted from the plan of the user or the guild it was
billed to. Charge-ups raise the plan's total.

---

## Headers
- `X-User-ID`: Acting user (required for all plan endpoints)
- `X-Guild-ID`: Guild the request was made in (omit for direct messages)
- `X-Manage-Guild`: `true` if the user may manage the guild's plan

---

## Response Format
Errors share one format:
- `success`: always `false`
- `error`: human-readable message
- `request_id`: short id also sent as `X-Request-ID`
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    logger.info("Starting Plan Ledger API...")

    try:
        from plan_ledger.db.connection import db
        if db.config.enabled:
            await db.get_engine_async()
            if os.getenv("DATABASE_CREATE_TABLES", "false").lower() == "true":
                await db.create_tables()
            logger.info("Database connection pool initialized")
    except Exception as e:
        logger.warning(f"Database initialization skipped: {e}")

    yield

    logger.info("Shutting down Plan Ledger API...")

    try:
        from plan_ledger.db.connection import db
        await db.close_all()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Database cleanup error: {e}")

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    api_prefix = os.getenv("API_PREFIX", DEFAULT_API_PREFIX)
    debug = os.getenv("DEBUG", "false").lower() == "true"

    app = FastAPI(
        title="Plan Ledger",
        description=API_DESCRIPTION,
        version=__version__,
        docs_url=DOCS_URL,
        redoc_url=REDOC_URL,
        openapi_url=OPENAPI_URL,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        debug=debug,
    )

    try:
        origins = json.loads(os.getenv("CORS_ORIGINS", '["*"]'))
    except json.JSONDecodeError:
        logger.warning("Invalid CORS_ORIGINS, allowing all origins")
        origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging and error handling
    add_middleware(app)
    register_exception_handlers(app)

    app.include_router(
        health_router,
        tags=["Health"],
    )

    app.include_router(
        plan_router,
        prefix=f"{api_prefix}/plan",
        tags=["Plan"],
    )

    return app
