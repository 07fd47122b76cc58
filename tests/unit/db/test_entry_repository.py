"""Unit tests for the entry repositories."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from plan_ledger.core.plan.entries import GuildEntry, UserEntry
from plan_ledger.core.plan.exceptions import PersistenceError
from plan_ledger.db.models import GuildModel, UserModel
from plan_ledger.db.repositories.entry_repository import (
    InMemoryEntryRepository,
    SqlEntryRepository,
)


def _mock_database(session):
    """DatabaseManager stand-in whose session() yields the given session."""
    database = MagicMock()

    @asynccontextmanager
    async def _session():
        yield session

    database.session = _session
    return database


class TestInMemoryEntryRepository:
    """Tests for InMemoryEntryRepository."""

    @pytest.mark.asyncio
    async def test_fetch_creates_missing_user(self):
        repository = InMemoryEntryRepository()

        user = await repository.fetch_user("user-1")

        assert isinstance(user, UserEntry)
        assert user.plan is None

    @pytest.mark.asyncio
    async def test_fetch_context(self):
        repository = InMemoryEntryRepository()

        context = await repository.fetch_context("user-1", "guild-1")

        assert context.user.id == "user-1"
        assert isinstance(context.guild, GuildEntry)

    @pytest.mark.asyncio
    async def test_fetch_context_without_guild(self):
        context = await InMemoryEntryRepository().fetch_context("user-1")

        assert context.guild is None

    @pytest.mark.asyncio
    async def test_update_persists_copy(self, plan_document):
        repository = InMemoryEntryRepository()
        user = await repository.fetch_user("user-1")
        document = plan_document(total="5")

        updated = await repository.update_entry(user, {"plan": document})
        document["total"] = "999"

        stored = await repository.fetch_user("user-1")
        assert updated.plan["total"] == "5"
        assert stored.plan["total"] == "5"

    @pytest.mark.asyncio
    async def test_fetched_entries_are_independent(self, plan_document):
        repository = InMemoryEntryRepository()
        user = await repository.fetch_user("user-1")
        await repository.update_entry(user, {"plan": plan_document(total="5")})

        first = await repository.fetch_user("user-1")
        first.plan["total"] = "0"

        assert (await repository.fetch_user("user-1")).plan["total"] == "5"

    @pytest.mark.asyncio
    async def test_fetch_entry_by_kind(self):
        repository = InMemoryEntryRepository()

        guild = await repository.fetch_entry("guild", "guild-1")
        user = await repository.fetch_entry("user", "user-1")

        assert isinstance(guild, GuildEntry)
        assert isinstance(user, UserEntry)
        assert guild.id == "guild-1"

    @pytest.mark.asyncio
    async def test_add_entry_stores_roles_and_plan(self, plan_document):
        repository = InMemoryEntryRepository()
        repository.add_entry(UserEntry(id="mod-1", roles=["moderator"], plan=plan_document(total="4")))

        stored = await repository.fetch_user("mod-1")

        assert stored.roles == ["moderator"]
        assert stored.plan["total"] == "4"

    @pytest.mark.asyncio
    async def test_rejects_unknown_fields(self, guild_entry):
        with pytest.raises(ValueError):
            await InMemoryEntryRepository().update_entry(guild_entry, {"roles": []})


class TestSqlEntryRepositoryFetch:
    """Tests for SqlEntryRepository reads."""

    @pytest.fixture
    def mock_db_session(self):
        session = AsyncMock()
        session.add = MagicMock()
        return session

    @pytest.mark.asyncio
    async def test_fetch_existing_user(self, mock_db_session, plan_document):
        row = UserModel(id="user-1", plan=plan_document(total="3"), user_metadata={"email": "a@b.c"}, roles=["vip"])
        mock_db_session.get = AsyncMock(return_value=row)
        repository = SqlEntryRepository(_mock_database(mock_db_session))

        user = await repository.fetch_user("user-1")

        assert user.plan["total"] == "3"
        assert user.metadata.email == "a@b.c"
        assert user.roles == ["vip"]
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_missing_guild_creates_row(self, mock_db_session):
        mock_db_session.get = AsyncMock(return_value=None)
        repository = SqlEntryRepository(_mock_database(mock_db_session))

        guild = await repository.fetch_guild("guild-1")

        assert guild.id == "guild-1"
        assert guild.plan is None
        added = mock_db_session.add.call_args[0][0]
        assert isinstance(added, GuildModel)

    @pytest.mark.asyncio
    async def test_database_error_wrapped(self, mock_db_session):
        mock_db_session.get = AsyncMock(side_effect=ProgrammingError("SELECT", {}, Exception("boom")))
        repository = SqlEntryRepository(_mock_database(mock_db_session))

        with pytest.raises(PersistenceError) as exc_info:
            await repository.fetch_user("user-1")

        assert exc_info.value.collection == "users"
        assert "Failed to perform database operation on collection 'users'" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_disabled_database(self):
        repository = SqlEntryRepository(_mock_database(None))

        with pytest.raises(PersistenceError):
            await repository.fetch_guild("guild-1")


class TestSqlEntryRepositoryUpdate:
    """Tests for SqlEntryRepository writes."""

    @pytest.fixture
    def mock_db_session(self):
        session = AsyncMock()
        session.execute = AsyncMock()
        return session

    @pytest.mark.asyncio
    async def test_update_upserts_plan(self, mock_db_session, user_entry, plan_document):
        repository = SqlEntryRepository(_mock_database(mock_db_session))

        updated = await repository.update_entry(user_entry, {"plan": plan_document(total="7")})

        assert updated.plan["total"] == "7"
        mock_db_session.execute.assert_awaited_once()
        statement = mock_db_session.execute.call_args[0][0]
        assert statement.table.name == "users"

    @pytest.mark.asyncio
    async def test_transient_errors_retried(self, mock_db_session, guild_entry, plan_document):
        mock_db_session.execute = AsyncMock(
            side_effect=[OperationalError("INSERT", {}, Exception("connection reset")), None]
        )
        repository = SqlEntryRepository(_mock_database(mock_db_session))

        with patch("asyncio.sleep", new=AsyncMock()):
            await repository.update_entry(guild_entry, {"plan": plan_document(total="1")})

        assert mock_db_session.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_persistent_error_wrapped(self, mock_db_session, guild_entry, plan_document):
        mock_db_session.execute = AsyncMock(side_effect=ProgrammingError("INSERT", {}, Exception("bad")))
        repository = SqlEntryRepository(_mock_database(mock_db_session))

        with pytest.raises(PersistenceError) as exc_info:
            await repository.update_entry(guild_entry, {"plan": plan_document()})

        assert exc_info.value.collection == "guilds"
        assert mock_db_session.execute.await_count == 1
