"""
Persistence gateway: SQL shape and error translation over a fake pool
"""

from datetime import datetime, timezone

import asyncpg
import pytest

from database import connection
from rpc.errors import ConstraintViolation, StoreConnectionError, ValidationError
from services.users_service import UsersService
from fakes import FakePool

CREATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestListUsers:

    @pytest.mark.asyncio
    async def test_selects_in_creation_order(self, fake_pool):
        fake_pool.connection.fetch_result = [
            {"id": 1, "name": "Ada", "email": "ada@x.com", "created_at": CREATED},
            {"id": 2, "name": "Bob", "email": "bob@x.com", "created_at": CREATED},
        ]

        users = await UsersService(fake_pool).list_users()

        kind, query, args = fake_pool.connection.statements[0]
        assert kind == "fetch"
        assert query == (
            "SELECT id, name, email, created_at FROM users ORDER BY created_at ASC, id ASC"
        )
        assert args == ()
        assert [u.id for u in users] == [1, 2]
        assert users[0].created_at == CREATED

    @pytest.mark.asyncio
    async def test_connection_is_released(self, fake_pool):
        await UsersService(fake_pool).list_users()

        assert fake_pool.acquired == fake_pool.released == 1


class TestInsertUser:

    @pytest.mark.asyncio
    async def test_inserts_writable_fields_only(self, fake_pool):
        fake_pool.connection.fetchrow_result = {
            "id": 7, "name": "Ada", "email": "ada@x.com", "created_at": CREATED
        }

        user = await UsersService(fake_pool).insert_user("Ada", "ada@x.com")

        kind, query, args = fake_pool.connection.statements[0]
        assert kind == "fetchrow"
        assert query == (
            "INSERT INTO users (name, email) VALUES ($1, $2) "
            "RETURNING id, name, email, created_at"
        )
        assert args == ("Ada", "ada@x.com")
        assert user.id == 7
        assert user.to_wire()["createdAt"].startswith("2024-05-01T12:00:00")

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_constraint_violation(self, fake_pool):
        fake_pool.connection.error = asyncpg.UniqueViolationError(
            'duplicate key value violates unique constraint "users_email_key"'
        )

        with pytest.raises(ConstraintViolation) as excinfo:
            await UsersService(fake_pool).insert_user("Ada", "ada@x.com")

        assert "email" in excinfo.value.message
        assert fake_pool.released == 1

    @pytest.mark.asyncio
    async def test_dropped_connection_becomes_connection_error(self, fake_pool):
        fake_pool.connection.error = ConnectionResetError("connection reset by peer")

        with pytest.raises(StoreConnectionError):
            await UsersService(fake_pool).insert_user("Ada", "ada@x.com")

        assert fake_pool.released == 1

    @pytest.mark.asyncio
    async def test_unstorable_character_is_a_validation_error(self, fake_pool):
        fake_pool.connection.error = asyncpg.CharacterNotInRepertoireError(
            "invalid byte sequence for encoding \"UTF8\": 0x00"
        )

        with pytest.raises(ValidationError) as excinfo:
            await UsersService(fake_pool).insert_user("Ad\x00a", "ada@x.com")

        assert excinfo.value.status_code == 400
        assert "0x00" not in excinfo.value.message

    @pytest.mark.asyncio
    async def test_store_error_message_is_generic(self, fake_pool):
        fake_pool.connection.error = asyncpg.UndefinedTableError('relation "users" does not exist')

        with pytest.raises(StoreConnectionError) as excinfo:
            await UsersService(fake_pool).list_users()

        assert excinfo.value.message == "Database is unavailable"


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_deletes_by_primary_key(self, fake_pool):
        fake_pool.connection.execute_result = "DELETE 1"

        assert await UsersService(fake_pool).delete_user(3) is None

        assert fake_pool.connection.statements[0] == (
            "execute", "DELETE FROM users WHERE id = $1", (3,)
        )

    @pytest.mark.asyncio
    async def test_missing_row_is_a_no_op(self, fake_pool):
        fake_pool.connection.execute_result = "DELETE 0"

        assert await UsersService(fake_pool).delete_user(999) is None

    @pytest.mark.asyncio
    async def test_store_error_is_surfaced(self, fake_pool):
        fake_pool.connection.error = asyncpg.PostgresError("relation \"users\" does not exist")

        with pytest.raises(StoreConnectionError) as excinfo:
            await UsersService(fake_pool).delete_user(1)

        assert excinfo.value.message == "Database is unavailable"
        assert "relation" not in excinfo.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [0, -5, 2 ** 31, 99999999999])
    async def test_id_outside_column_range_is_a_no_op(self, fake_pool, user_id):
        assert await UsersService(fake_pool).delete_user(user_id) is None

        assert fake_pool.connection.statements == []

    @pytest.mark.asyncio
    async def test_data_error_is_a_validation_error(self, fake_pool):
        fake_pool.connection.error = asyncpg.DataError("invalid input for query argument $1")

        with pytest.raises(ValidationError):
            await UsersService(fake_pool).delete_user(5)

        assert fake_pool.released == 1


class TestPoolAcquisition:

    @pytest.mark.asyncio
    async def test_acquire_timeout_becomes_connection_error(self):
        pool = FakePool(acquire_delay=1.0)

        with pytest.raises(StoreConnectionError):
            async with connection.acquire(pool, timeout=0.01):
                pass

        assert pool.released == 0

    @pytest.mark.asyncio
    async def test_uninitialized_pool(self, monkeypatch):
        monkeypatch.setattr(connection, "db_pool", None)

        with pytest.raises(StoreConnectionError):
            await UsersService().list_users()

    @pytest.mark.asyncio
    async def test_global_pool_is_used_by_default(self, monkeypatch, fake_pool):
        monkeypatch.setattr(connection, "db_pool", fake_pool)

        assert await UsersService().list_users() == []
        assert fake_pool.acquired == 1

    @pytest.mark.asyncio
    async def test_failed_startup_check_closes_the_pool(self, monkeypatch):
        pool = FakePool()
        pool.connection.error = ConnectionRefusedError("connection refused")

        async def create_pool(*args, **kwargs):
            return pool

        monkeypatch.setattr(connection.settings, "DATABASE_URL", "postgresql://localhost/test")
        monkeypatch.setattr(connection.asyncpg, "create_pool", create_pool)
        monkeypatch.setattr(connection, "db_pool", None)

        with pytest.raises(StoreConnectionError):
            await connection.init_database()

        assert pool.closed
        assert pool.released == 1
        assert connection.db_pool is None
