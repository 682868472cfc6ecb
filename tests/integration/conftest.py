"""
Shared fixtures for integration tests.

Requires PostgreSQL at settings.database_url (DATABASE_URL). The whole
directory is skipped when the database cannot be reached.
"""

from collections.abc import AsyncGenerator

import psycopg
import pytest
import pytest_asyncio
from psycopg_pool import AsyncConnectionPool

from src.adapters.repository.postgres import close_pool, create_pool, run_migrations
from src.adapters.repository.tokens import PostgresEmailVerificationTokenStore
from src.adapters.repository.users import PostgresUserRepository
from src.config.settings import get_settings

# Module-level marker for all integration tests
pytestmark = pytest.mark.integration


@pytest.fixture(scope="session")
def database_available() -> None:
    """Skip integration tests when PostgreSQL is not reachable."""
    settings = get_settings()
    try:
        with psycopg.connect(settings.database_url, connect_timeout=3):
            pass
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")


@pytest_asyncio.fixture
async def pool(database_available: None) -> AsyncGenerator[AsyncConnectionPool, None]:
    """Create a migrated, empty database and a pool owned by the test."""
    pool = await create_pool(get_settings())
    await run_migrations(pool)
    async with pool.connection() as conn:
        await conn.execute("DELETE FROM email_verification_tokens")
        await conn.execute("DELETE FROM users")
        await conn.commit()
    yield pool
    await close_pool(pool)


@pytest.fixture
def users(pool: AsyncConnectionPool) -> PostgresUserRepository:
    """Create user repository instance for each test."""
    return PostgresUserRepository(pool)


@pytest.fixture
def tokens(pool: AsyncConnectionPool) -> PostgresEmailVerificationTokenStore:
    """Create token store instance for each test."""
    return PostgresEmailVerificationTokenStore(pool)
