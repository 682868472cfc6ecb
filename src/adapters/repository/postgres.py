"""
PostgreSQL plumbing shared by the repository adapters.

- Connection pool lifecycle: the pool is created and closed explicitly
  by its owner (application lifespan, test fixtures) and handed to each
  repository constructor. Nothing here keeps a module-level pool.
- Predicate translation: domain Conditions become psycopg.sql
  composables with one placeholder per value. Column names are quoted
  as identifiers; values never reach the query text.
- Error translation: psycopg errors are re-raised as domain
  RepositoryError with the driver error attached as __cause__.
- Migrations: idempotent .sql files executed in sorted order.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, assert_never

import psycopg
from psycopg import errors, sql
from psycopg_pool import AsyncConnectionPool

from src.config.settings import Settings
from src.domain.conditions import Condition, Operator
from src.domain.exceptions import DuplicateRecordError, RepositoryError

logger = logging.getLogger(__name__)


async def create_pool(settings: Settings) -> AsyncConnectionPool:
    """
    Create and open a bounded async connection pool.

    Connection acquisition waits at most `pool_timeout_seconds` before
    raising PoolTimeout. Every session gets a server-side statement_timeout
    so a stuck round-trip fails instead of hanging.

    Args:
        settings: Application settings

    Returns:
        Opened AsyncConnectionPool, owned by the caller
    """
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout_seconds,
        max_idle=settings.idle_timeout_seconds,
        kwargs={
            "connect_timeout": settings.connect_timeout_seconds,
            "options": f"-c statement_timeout={settings.statement_timeout_ms}",
        },
        open=False,
    )
    await pool.open()
    logger.info(
        "Database pool opened (min_size=%d, max_size=%d)",
        settings.pool_min_size,
        settings.pool_max_size,
    )
    return pool


async def close_pool(pool: AsyncConnectionPool) -> None:
    """Release every pooled connection."""
    await pool.close()
    logger.info("Database connection pool closed")


def where_clause(conditions: Sequence[Condition]) -> tuple[sql.Composed, list[Any]]:
    """
    Translate conditions into an OR-joined, parameterized predicate.

    Args:
        conditions: Non-empty list produced by build_conditions()

    Returns:
        Tuple of (predicate composable, positional parameters)
    """
    parts: list[sql.Composable] = []
    params: list[Any] = []
    for condition in conditions:
        column = sql.Identifier(condition.field)
        match condition.operator:
            case Operator.EQ:
                parts.append(sql.SQL("{} = {}").format(column, sql.Placeholder()))
                params.append(condition.value)
            case Operator.IN:
                placeholders = sql.SQL(", ").join([sql.Placeholder()] * len(condition.value))
                parts.append(sql.SQL("{} IN ({})").format(column, placeholders))
                params.extend(condition.value)
            case _:
                assert_never(condition.operator)
    return sql.SQL("({})").format(sql.SQL(" OR ").join(parts)), params


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors from `operation` as domain RepositoryError."""
    try:
        yield
    except errors.UniqueViolation as e:
        constraint = e.diag.constraint_name or "unique constraint"
        raise DuplicateRecordError(f"{operation}: {constraint} violated") from e
    except psycopg.Error as e:
        raise RepositoryError(f"{operation} failed") from e


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)
                await conn.commit()

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
