"""
PostgreSQL database package for the plan ledger.

Provides:
- SQLAlchemy 2.0 models for user and guild entries
- Async connection management
- Entry repositories (persistence port of the ledger)
"""

from .connection import DatabaseManager, db
from .models import Base, UserModel, GuildModel

__all__ = [
    "DatabaseManager",
    "db",
    "Base",
    "UserModel",
    "GuildModel",
]
