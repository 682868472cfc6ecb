"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, Request
from psycopg_pool import AsyncConnectionPool

from src.adapters.repository.tokens import PostgresEmailVerificationTokenStore
from src.adapters.repository.users import PostgresUserRepository
from src.adapters.security.bcrypt_hasher import BcryptPasswordHasher
from src.adapters.smtp.console import ConsoleMailSender
from src.adapters.smtp.smtp import SmtpMailSender
from src.config.settings import Settings, get_settings
from src.domain.ports import MailSender
from src.domain.registration import RegistrationService


def get_pool(request: Request) -> AsyncConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_user_repository(request: Request) -> PostgresUserRepository:
    """Create user repository with connection pool from app state."""
    return PostgresUserRepository(get_pool(request))


def get_token_store(request: Request) -> PostgresEmailVerificationTokenStore:
    """Create verification-token store with connection pool from app state."""
    return PostgresEmailVerificationTokenStore(get_pool(request))


# Module-level singleton - ConsoleMailSender is stateless
_console_sender = ConsoleMailSender()


def get_mail_sender(settings: Settings = Depends(get_settings)) -> MailSender:
    """Get the configured mail sender (console singleton or SMTP)."""
    if settings.mail_backend == "smtp":
        return SmtpMailSender.from_settings(settings)
    return _console_sender


def get_password_hasher(settings: Settings = Depends(get_settings)) -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_cost)


def get_registration_service(
    users: PostgresUserRepository = Depends(get_user_repository),
    tokens: PostgresEmailVerificationTokenStore = Depends(get_token_store),
    mail_sender: MailSender = Depends(get_mail_sender),
    password_hasher: BcryptPasswordHasher = Depends(get_password_hasher),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repositories, mail sender and hasher for the domain service.
    """
    return RegistrationService(
        users=users,
        tokens=tokens,
        mail_sender=mail_sender,
        password_hasher=password_hasher,
        verification_base_url=settings.verification_base_url,
        token_bytes=settings.token_bytes,
        token_max_age_hours=settings.token_max_age_hours,
    )
