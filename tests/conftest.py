"""
Shared test fixtures and configuration.

Unit tests (tests/unit) run against in-memory fakes of the domain ports.
Integration tests (tests/integration) need PostgreSQL at
settings.database_url and are skipped when it cannot be reached.
"""

import pytest

from src.domain.ports import MailMessage


@pytest.fixture
def sample_message() -> MailMessage:
    """A verification email as the registration service builds it."""
    return MailMessage(
        to="alice@example.com",
        subject="Verify your email address",
        text="Dearest alice,\n\nhttps://sample.com/verify/abc123\n",
        html='<p><a href="https://sample.com/verify/abc123">verify</a></p>',
    )
