"""Repository layer for billing entries."""

from .entry_repository import (
    BaseEntryRepository,
    InMemoryEntryRepository,
    SqlEntryRepository,
)

__all__ = [
    "BaseEntryRepository",
    "InMemoryEntryRepository",
    "SqlEntryRepository",
]
