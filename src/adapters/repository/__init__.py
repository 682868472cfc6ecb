"""Repository adapters - Database implementations."""

from .postgres import close_pool, create_pool, run_migrations
from .tokens import PostgresEmailVerificationTokenStore
from .users import PostgresUserRepository

__all__ = [
    "PostgresEmailVerificationTokenStore",
    "PostgresUserRepository",
    "close_pool",
    "create_pool",
    "run_migrations",
]
