"""
Entry repositories - persistence port of the plan ledger.

Two implementations share the same contract:
- SqlEntryRepository: PostgreSQL `users` / `guilds` tables (JSONB documents)
- InMemoryEntryRepository: process-local store for development and tests

`update_entry(entry, fields)` upserts the given top-level fields onto the
entry's row and returns the updated entry. Plans are always written whole.
"""

import copy
import logging
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from plan_ledger.constants import COLLECTION_GUILDS, COLLECTION_USERS
from plan_ledger.core.plan.entries import BillingContext, Entry, GuildEntry, UserEntry
from plan_ledger.core.plan.exceptions import PersistenceError
from plan_ledger.db.connection import DatabaseManager, db
from plan_ledger.db.models import GuildModel, UserModel
from plan_ledger.db.utils import db_retry

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = {
    "user": {"plan", "subscription", "metadata", "roles"},
    "guild": {"plan", "subscription"},
}


def _collection(kind: str) -> str:
    return COLLECTION_GUILDS if kind == "guild" else COLLECTION_USERS


def _check_fields(entry: Entry, fields: Dict[str, Any]) -> None:
    unknown = set(fields) - WRITABLE_FIELDS[entry.kind]
    if unknown:
        raise ValueError(f"Cannot update {sorted(unknown)} on {entry.kind} entries")


def _apply_fields(entry: Entry, fields: Dict[str, Any]) -> Entry:
    """Return a validated copy of the entry with the fields replaced."""
    return type(entry).model_validate({**entry.model_dump(mode="json"), **fields})


class BaseEntryRepository:
    """Shared helpers for entry repositories."""

    async def fetch_user(self, user_id: str) -> UserEntry:
        raise NotImplementedError

    async def fetch_guild(self, guild_id: str) -> GuildEntry:
        raise NotImplementedError

    async def update_entry(self, entry: Entry, fields: Dict[str, Any]) -> Entry:
        raise NotImplementedError

    async def fetch_entry(self, kind: str, entry_id: str) -> Entry:
        """Fetch a user or guild entry by kind, creating it if missing."""
        if kind == "guild":
            return await self.fetch_guild(entry_id)
        return await self.fetch_user(entry_id)

    async def fetch_context(self, user_id: str, guild_id: Optional[str] = None) -> BillingContext:
        """
        Fetch the billing context of a request, creating missing entries.

        Args:
            user_id: Acting user ID
            guild_id: Guild the request was made in, if any

        Returns:
            BillingContext with user and optional guild entry
        """
        user = await self.fetch_user(user_id)
        guild = await self.fetch_guild(guild_id) if guild_id else None
        return BillingContext(user=user, guild=guild)


class SqlEntryRepository(BaseEntryRepository):
    """Entry repository backed by PostgreSQL."""

    def __init__(self, database: Optional[DatabaseManager] = None):
        self._db = database or db

    @db_retry
    async def _fetch_or_create(self, model, entry_id: str) -> Dict[str, Any]:
        async with self._db.session() as session:
            if session is None:
                raise PersistenceError(model.__tablename__, "Database disabled")

            row = await session.get(model, entry_id)
            if row is None:
                row = model(id=entry_id)
                if model is UserModel:
                    row.user_metadata = {}
                    row.roles = []
                session.add(row)
                logger.info(f"Created {model.__tablename__} entry {entry_id}")

            document = {"id": row.id, "plan": row.plan, "subscription": row.subscription}
            if model is UserModel:
                document["metadata"] = row.user_metadata or {}
                document["roles"] = row.roles or []
            return document

    async def fetch_user(self, user_id: str) -> UserEntry:
        try:
            return UserEntry.model_validate(await self._fetch_or_create(UserModel, user_id))
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch user {user_id}: {e}")
            raise PersistenceError(COLLECTION_USERS, str(e)) from e

    async def fetch_guild(self, guild_id: str) -> GuildEntry:
        try:
            return GuildEntry.model_validate(await self._fetch_or_create(GuildModel, guild_id))
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch guild {guild_id}: {e}")
            raise PersistenceError(COLLECTION_GUILDS, str(e)) from e

    @db_retry
    async def _upsert(self, entry: Entry, values: Dict[str, Any]) -> None:
        table = (GuildModel if entry.kind == "guild" else UserModel).__table__

        async with self._db.session() as session:
            if session is None:
                raise PersistenceError(table.name, "Database disabled")

            statement = (
                insert(table)
                .values(id=entry.id, **values)
                .on_conflict_do_update(
                    index_elements=[table.c.id],
                    set_={**values, "updated_at": func.now()},
                )
            )
            await session.execute(statement)

    async def update_entry(self, entry: Entry, fields: Dict[str, Any]) -> Entry:
        """
        Upsert fields onto the entry's row.

        Args:
            entry: Entry to update
            fields: Top-level fields to replace (e.g. {"plan": {...}})

        Returns:
            The updated entry

        Raises:
            PersistenceError: If the database operation fails
        """
        _check_fields(entry, fields)
        updated = _apply_fields(entry, fields)
        values = {name: updated.model_dump(mode="json")[name] for name in fields}

        try:
            await self._upsert(entry, values)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update {entry.kind} {entry.id}: {e}")
            raise PersistenceError(_collection(entry.kind), str(e)) from e

        return updated


class InMemoryEntryRepository(BaseEntryRepository):
    """Process-local entry repository."""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Dict[str, Any]]] = {
            "user": {},
            "guild": {},
        }

    def _fetch(self, kind: str, entry_id: str, model) -> Any:
        store = self._documents[kind]
        if entry_id not in store:
            store[entry_id] = model(id=entry_id).model_dump(mode="json")
            logger.debug(f"Created {_collection(kind)} entry {entry_id}")
        return model.model_validate(copy.deepcopy(store[entry_id]))

    async def fetch_user(self, user_id: str) -> UserEntry:
        return self._fetch("user", user_id, UserEntry)

    async def fetch_guild(self, guild_id: str) -> GuildEntry:
        return self._fetch("guild", guild_id, GuildEntry)

    def add_entry(self, entry: Entry) -> None:
        """Store an entry as-is, replacing any existing document."""
        self._documents[entry.kind][entry.id] = entry.model_dump(mode="json")

    async def update_entry(self, entry: Entry, fields: Dict[str, Any]) -> Entry:
        _check_fields(entry, fields)
        updated = _apply_fields(entry, copy.deepcopy(fields))
        self._documents[entry.kind][entry.id] = updated.model_dump(mode="json")
        return updated


__all__ = [
    "WRITABLE_FIELDS",
    "BaseEntryRepository",
    "SqlEntryRepository",
    "InMemoryEntryRepository",
]
