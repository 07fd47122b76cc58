"""
FastAPI service for the plan ledger.

This service provides a REST API for:
- Usage overviews of user and guild plans
- Plan status snapshots
- Plan provisioning and charge-ups

Usage:
    uvicorn plan_ledger.main:app --reload --host 0.0.0.0 --port 8001
"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables before importing anything else
load_dotenv()

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from plan_ledger.api import create_app  # noqa: E402

app = create_app()

logger.info("Plan Ledger initialized")
logger.info("API documentation available at /docs and /redoc")


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8001"))
    reload = os.getenv("DEBUG", "false").lower() == "true"

    logger.info(f"Starting server on {host}:{port}")

    uvicorn.run(
        "plan_ledger.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    run()
