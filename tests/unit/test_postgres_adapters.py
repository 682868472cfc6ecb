"""
Unit tests for the PostgreSQL adapters that need no database.

Tests verify:
- Predicate translation keeps values out of the query text
- Driver errors are re-raised as domain errors with the cause attached
- Precondition failures return INVALID without borrowing a connection
- put() dispatches on user_id
"""

from unittest.mock import AsyncMock, MagicMock

import psycopg
import pytest
from psycopg import errors, sql

from src.adapters.repository.postgres import translate_errors, where_clause
from src.adapters.repository.tokens import PostgresEmailVerificationTokenStore
from src.adapters.repository.users import PostgresUserRepository
from src.domain.conditions import Condition, Operator
from src.domain.exceptions import DuplicateRecordError, RepositoryError
from src.domain.models import TokenCriteria, UserCriteria, UserResult
from src.domain.result import ResultStatus


class TestWhereClause:
    """Tests for Condition -> SQL translation."""

    def test_equality_binds_one_parameter(self) -> None:
        predicate, params = where_clause([Condition("username", Operator.EQ, "alice")])

        assert isinstance(predicate, sql.Composed)
        assert params == ["alice"]

    def test_membership_binds_each_value(self) -> None:
        _, params = where_clause([Condition("user_id", Operator.IN, ("a", "b", "c"))])

        assert params == ["a", "b", "c"]

    def test_parameters_follow_condition_order(self) -> None:
        _, params = where_clause(
            [
                Condition("user_id", Operator.IN, ("u1", "u2")),
                Condition("username", Operator.EQ, "alice"),
                Condition("email", Operator.EQ, "a@example.com"),
            ]
        )

        assert params == ["u1", "u2", "alice", "a@example.com"]

    def test_values_never_reach_query_text(self) -> None:
        """Hostile values stay parameters; only identifiers and placeholders are composed."""
        hostile = "x' OR '1'='1"
        predicate, params = where_clause([Condition("username", Operator.EQ, hostile)])

        assert params == [hostile]
        assert hostile not in repr(predicate)


class TestTranslateErrors:
    """Tests for driver error translation."""

    def test_unique_violation_becomes_duplicate_record_error(self) -> None:
        with pytest.raises(DuplicateRecordError) as exc_info:
            with translate_errors("create user"):
                raise errors.UniqueViolation("duplicate key value")

        assert isinstance(exc_info.value.__cause__, errors.UniqueViolation)
        assert str(exc_info.value).startswith("create user")

    def test_other_driver_errors_become_repository_error(self) -> None:
        with pytest.raises(RepositoryError) as exc_info:
            with translate_errors("get users"):
                raise psycopg.OperationalError("connection lost")

        assert not isinstance(exc_info.value, DuplicateRecordError)
        assert isinstance(exc_info.value.__cause__, psycopg.OperationalError)

    def test_non_driver_errors_pass_through(self) -> None:
        with pytest.raises(ValueError):
            with translate_errors("get users"):
                raise ValueError("bug")


@pytest.fixture
def pool() -> MagicMock:
    return MagicMock()


@pytest.mark.asyncio
class TestUserRepositoryPreconditions:
    """INVALID outcomes are decided before a connection is borrowed."""

    @pytest.mark.parametrize(
        ("username", "email", "password_hash"),
        [
            (None, "a@example.com", "hash"),
            ("alice", None, "hash"),
            ("alice", "a@example.com", None),
            ("", "a@example.com", "hash"),
        ],
    )
    async def test_create_requires_all_fields(self, pool, username, email, password_hash) -> None:
        repository = PostgresUserRepository(pool)

        result = await repository.create(username, email, password_hash)

        assert result.status is ResultStatus.INVALID
        pool.connection.assert_not_called()

    async def test_update_requires_user_id(self, pool) -> None:
        result = await PostgresUserRepository(pool).update(None, username="x")

        assert result.status is ResultStatus.INVALID
        pool.connection.assert_not_called()

    async def test_update_requires_a_field(self, pool) -> None:
        result = await PostgresUserRepository(pool).update("u1")

        assert result.status is ResultStatus.INVALID
        pool.connection.assert_not_called()

    @pytest.mark.parametrize(
        "criteria", [UserCriteria(), UserCriteria(user_id=[]), UserCriteria(email=())]
    )
    async def test_get_and_delete_need_usable_criteria(self, pool, criteria) -> None:
        repository = PostgresUserRepository(pool)

        assert (await repository.get(criteria)).status is ResultStatus.INVALID
        assert (await repository.delete(criteria)).status is ResultStatus.INVALID
        pool.connection.assert_not_called()

    async def test_put_with_user_id_updates(self, pool) -> None:
        repository = PostgresUserRepository(pool)
        repository.update = AsyncMock(return_value=UserResult(status=ResultStatus.SUCCESS))
        repository.create = AsyncMock()

        await repository.put(user_id="u1", email_validated=False)

        repository.update.assert_awaited_once_with(
            "u1", username=None, email=None, password_hash=None, email_validated=False
        )
        repository.create.assert_not_awaited()

    async def test_put_without_user_id_creates(self, pool) -> None:
        repository = PostgresUserRepository(pool)
        repository.create = AsyncMock(return_value=UserResult(status=ResultStatus.CREATED))
        repository.update = AsyncMock()

        await repository.put(username="alice", email="a@example.com", password_hash="h")

        repository.create.assert_awaited_once_with("alice", "a@example.com", "h")
        repository.update.assert_not_awaited()


@pytest.mark.asyncio
class TestTokenStorePreconditions:
    @pytest.mark.parametrize(("user_id", "token"), [(None, "t"), ("u1", None), ("", "")])
    async def test_create_token_requires_both(self, pool, user_id, token) -> None:
        result = await PostgresEmailVerificationTokenStore(pool).create_token(user_id, token)

        assert result.status is ResultStatus.INVALID
        pool.connection.assert_not_called()

    async def test_lookup_and_delete_need_usable_criteria(self, pool) -> None:
        store = PostgresEmailVerificationTokenStore(pool)

        assert (await store.get_tokens(TokenCriteria())).status is ResultStatus.INVALID
        assert (await store.delete_token(TokenCriteria(token=[]))).status is ResultStatus.INVALID
        pool.connection.assert_not_called()
