"""
PostgreSQL user repository - Implements UserRepository protocol.

All lookups go through build_conditions(): the supplied criteria are
OR-joined, and criteria with nothing usable are rejected as INVALID
before a connection is borrowed. Uniqueness of username and email is
enforced by the table's UNIQUE constraints only; no pre-check is done
here, so a violation surfaces as DuplicateRecordError.
"""

import logging
from typing import Any

from psycopg import sql
from psycopg.rows import class_row
from psycopg_pool import AsyncConnectionPool

from src.domain.conditions import build_conditions
from src.domain.models import User, UserCriteria, UserResult
from src.domain.result import ResultStatus

from .postgres import translate_errors, where_clause

logger = logging.getLogger(__name__)

_USER_COLUMNS = sql.SQL(
    "user_id, username, email, password_hash, email_validated, created, updated"
)


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def create(
        self, username: str | None, email: str | None, password_hash: str | None
    ) -> UserResult:
        """
        Insert a new user with email_validated = false.

        The id and both timestamps are assigned by the database.

        Returns:
            CREATED with the inserted row (password hash included),
            INVALID if any argument is missing

        Raises:
            DuplicateRecordError: username or email already exists
            RepositoryError: any other database failure
        """
        if not username or not email or not password_hash:
            return UserResult(status=ResultStatus.INVALID)

        query = sql.SQL(
            """
            INSERT INTO users (username, email, password_hash, email_validated)
            VALUES (%s, %s, %s, false)
            RETURNING {columns}
            """
        ).format(columns=_USER_COLUMNS)

        users = await self._fetch("create user", query, [username, email, password_hash])
        logger.debug("Created user %s", users[0].user_id)
        return UserResult(status=ResultStatus.CREATED, users=users)

    async def update(
        self,
        user_id: str | None,
        *,
        username: str | None = None,
        email: str | None = None,
        password_hash: str | None = None,
        email_validated: bool | None = None,
    ) -> UserResult:
        """
        Apply the supplied fields to one user.

        A field is supplied when it is not None, so "" and False are real
        updates. `updated` is refreshed on every successful call.

        Returns:
            SUCCESS with the updated row; INVALID when user_id is missing,
            no field is supplied, or no row has that user_id

        Raises:
            DuplicateRecordError: new username or email already exists
            RepositoryError: any other database failure
        """
        if not user_id:
            return UserResult(status=ResultStatus.INVALID)

        changes = {
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "email_validated": email_validated,
        }
        assignments: list[sql.Composable] = []
        params: list[Any] = []
        for column, value in changes.items():
            if value is not None:
                assignments.append(sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder()))
                params.append(value)

        if not assignments:
            return UserResult(status=ResultStatus.INVALID)

        query = sql.SQL(
            """
            UPDATE users
            SET {assignments}, updated = clock_timestamp()
            WHERE user_id = %s
            RETURNING {columns}
            """
        ).format(assignments=sql.SQL(", ").join(assignments), columns=_USER_COLUMNS)

        users = await self._fetch("update user", query, [*params, user_id])
        if not users:
            # Zero rows affected: unknown user_id
            return UserResult(status=ResultStatus.INVALID)
        return UserResult(status=ResultStatus.SUCCESS, users=users)

    async def get(self, criteria: UserCriteria) -> UserResult:
        """
        Fetch every user matching any of the criteria.

        Returns:
            SUCCESS with zero or more rows, INVALID if no criterion is usable
        """
        conditions = build_conditions(criteria)
        if not conditions:
            return UserResult(status=ResultStatus.INVALID)

        predicate, params = where_clause(conditions)
        query = sql.SQL("SELECT {columns} FROM users WHERE {predicate} ORDER BY created").format(
            columns=_USER_COLUMNS, predicate=predicate
        )
        users = await self._fetch("get users", query, params)
        return UserResult(status=ResultStatus.SUCCESS, users=users)

    async def delete(self, criteria: UserCriteria) -> UserResult:
        """
        Delete every user matching any of the criteria.

        Verification tokens are not cascaded; sweep or delete them separately.

        Returns:
            DELETED with the removed rows (possibly none),
            INVALID if no criterion is usable
        """
        conditions = build_conditions(criteria)
        if not conditions:
            return UserResult(status=ResultStatus.INVALID)

        predicate, params = where_clause(conditions)
        query = sql.SQL("DELETE FROM users WHERE {predicate} RETURNING {columns}").format(
            columns=_USER_COLUMNS, predicate=predicate
        )
        users = await self._fetch("delete users", query, params)
        return UserResult(status=ResultStatus.DELETED, users=users)

    async def put(
        self,
        *,
        user_id: str | None = None,
        username: str | None = None,
        email: str | None = None,
        password_hash: str | None = None,
        email_validated: bool | None = None,
    ) -> UserResult:
        """Update when user_id is given, otherwise create."""
        if user_id:
            return await self.update(
                user_id,
                username=username,
                email=email,
                password_hash=password_hash,
                email_validated=email_validated,
            )
        return await self.create(username, email, password_hash)

    async def _fetch(self, operation: str, query: sql.Composed, params: list[Any]) -> list[User]:
        with translate_errors(operation):
            async with (
                self._pool.connection() as conn,
                conn.cursor(row_factory=class_row(User)) as cursor,
            ):
                await cursor.execute(query, params)
                rows = await cursor.fetchall()
                await conn.commit()
        return rows
