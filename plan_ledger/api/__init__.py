"""HTTP API for the plan ledger."""

from .app import create_app

__all__ = ["create_app"]
