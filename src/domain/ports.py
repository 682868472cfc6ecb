"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from typing import Protocol

from .models import TokenCriteria, TokenResult, UserCriteria, UserResult
from .result import ResultStatus


@dataclass(frozen=True)
class MailMessage:
    """Outbound email."""

    to: str
    subject: str
    text: str
    html: str | None = None


@dataclass(frozen=True)
class MailOutcome:
    """Result of handing a message to the transport (SUCCESS or FAILED)."""

    status: ResultStatus


class UserRepository(Protocol):
    """Port interface for user persistence."""

    async def create(
        self, username: str | None, email: str | None, password_hash: str | None
    ) -> UserResult:
        """
        Insert a new, unvalidated user.

        Returns:
            CREATED with the inserted row, INVALID if an argument is missing

        Raises:
            DuplicateRecordError: username or email already taken
        """
        ...

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
        Apply the supplied fields to one user and refresh `updated`.

        Returns:
            SUCCESS with the updated row, INVALID if nothing to update
            or the user does not exist
        """
        ...

    async def get(self, criteria: UserCriteria) -> UserResult:
        """SUCCESS with every user matching any criterion, INVALID if none usable."""
        ...

    async def delete(self, criteria: UserCriteria) -> UserResult:
        """DELETED with every removed user, INVALID if no criterion usable."""
        ...

    async def put(
        self,
        *,
        user_id: str | None = None,
        username: str | None = None,
        email: str | None = None,
        password_hash: str | None = None,
        email_validated: bool | None = None,
    ) -> UserResult:
        """Update the user when `user_id` is given, otherwise create one."""
        ...


class EmailVerificationTokenStore(Protocol):
    """Port interface for verification-token persistence."""

    async def create_token(self, user_id: str | None, token: str | None) -> TokenResult:
        """CREATED with the new record, INVALID if an argument is missing."""
        ...

    async def get_tokens(self, criteria: TokenCriteria) -> TokenResult:
        """SUCCESS with matching records (newest first), INVALID if none usable."""
        ...

    async def delete_token(self, criteria: TokenCriteria) -> TokenResult:
        """DELETED with removed records, INVALID if no criterion usable."""
        ...

    async def sweep_expired(self, max_age_hours: int = 24) -> TokenResult:
        """Delete every record older than the cutoff. Always DELETED."""
        ...


class MailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, message: MailMessage) -> MailOutcome:
        """
        Hand a message to the mail transport.

        Transport errors and refused deliveries are both reported as
        FAILED, never raised.
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Return a salted hash with the salt embedded in the output."""
        ...
