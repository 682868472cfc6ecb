"""
PostgreSQL verification-token store - Implements EmailVerificationTokenStore.

Tokens are never updated. Several live tokens may exist per user and
issuing a new one leaves older ones untouched. Expiry is enforced only
by sweep_expired().
"""

import logging
from typing import Any

from psycopg import sql
from psycopg.rows import class_row
from psycopg_pool import AsyncConnectionPool

from src.domain.conditions import build_conditions
from src.domain.models import EmailVerificationToken, TokenCriteria, TokenResult
from src.domain.result import ResultStatus

from .postgres import translate_errors, where_clause

logger = logging.getLogger(__name__)

_TOKEN_COLUMNS = sql.SQL("token_id, user_id, token, created")


class PostgresEmailVerificationTokenStore:
    """
    Implements EmailVerificationTokenStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def create_token(self, user_id: str | None, token: str | None) -> TokenResult:
        """CREATED with the stored record, INVALID if either argument is missing."""
        if not user_id or not token:
            return TokenResult(status=ResultStatus.INVALID)

        query = sql.SQL(
            "INSERT INTO email_verification_tokens (user_id, token) VALUES (%s, %s) RETURNING {columns}"
        ).format(columns=_TOKEN_COLUMNS)
        tokens = await self._fetch("create verification token", query, [user_id, token])
        return TokenResult(status=ResultStatus.CREATED, tokens=tokens)

    async def get_tokens(self, criteria: TokenCriteria) -> TokenResult:
        """SUCCESS with matching records, newest first; INVALID if no criterion is usable."""
        conditions = build_conditions(criteria)
        if not conditions:
            return TokenResult(status=ResultStatus.INVALID)

        predicate, params = where_clause(conditions)
        query = sql.SQL(
            "SELECT {columns} FROM email_verification_tokens WHERE {predicate} ORDER BY created DESC"
        ).format(columns=_TOKEN_COLUMNS, predicate=predicate)
        tokens = await self._fetch("get verification tokens", query, params)
        return TokenResult(status=ResultStatus.SUCCESS, tokens=tokens)

    async def delete_token(self, criteria: TokenCriteria) -> TokenResult:
        """DELETED with the removed records; INVALID if no criterion is usable."""
        conditions = build_conditions(criteria)
        if not conditions:
            return TokenResult(status=ResultStatus.INVALID)

        predicate, params = where_clause(conditions)
        query = sql.SQL(
            "DELETE FROM email_verification_tokens WHERE {predicate} RETURNING {columns}"
        ).format(columns=_TOKEN_COLUMNS, predicate=predicate)
        tokens = await self._fetch("delete verification tokens", query, params)
        return TokenResult(status=ResultStatus.DELETED, tokens=tokens)

    async def sweep_expired(self, max_age_hours: int = 24) -> TokenResult:
        """
        Delete every token created more than `max_age_hours` ago.

        Maintenance operation: always DELETED, with the (possibly empty)
        list of removed records.
        """
        query = sql.SQL(
            """
            DELETE FROM email_verification_tokens
            WHERE created < NOW() - make_interval(hours => %s)
            RETURNING {columns}
            """
        ).format(columns=_TOKEN_COLUMNS)
        tokens = await self._fetch("sweep expired verification tokens", query, [max_age_hours])
        if tokens:
            logger.info("Removed %d verification token(s) older than %dh", len(tokens), max_age_hours)
        return TokenResult(status=ResultStatus.DELETED, tokens=tokens)

    async def _fetch(
        self, operation: str, query: sql.Composed, params: list[Any]
    ) -> list[EmailVerificationToken]:
        with translate_errors(operation):
            async with (
                self._pool.connection() as conn,
                conn.cursor(row_factory=class_row(EmailVerificationToken)) as cursor,
            ):
                await cursor.execute(query, params)
                rows = await cursor.fetchall()
                await conn.commit()
        return rows
