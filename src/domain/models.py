"""
Domain models - Entities, filter criteria and operation results.

Entities are plain dataclasses whose field names match the database
columns, so adapters can map rows straight into them.
"""

from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .result import ResultStatus

# A filter value: absent, one value, or a collection of values.
FieldValue = str | Collection[str] | None


@dataclass
class User:
    """Registered user account."""

    user_id: str
    username: str
    email: str
    password_hash: str = field(repr=False)
    email_validated: bool = False
    created: datetime | None = None
    updated: datetime | None = None

    def to_public(self) -> dict[str, Any]:
        """External projection - never includes the password hash."""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "email_validated": self.email_validated,
            "created": self.created,
            "updated": self.updated,
        }


@dataclass
class EmailVerificationToken:
    """Verification token issued to a user."""

    token_id: str
    user_id: str
    token: str
    created: datetime | None = None


@dataclass(frozen=True)
class UserCriteria:
    """Identifying attributes to match users by (joined with OR)."""

    user_id: FieldValue = None
    username: FieldValue = None
    email: FieldValue = None


@dataclass(frozen=True)
class TokenCriteria:
    """Identifying attributes to match verification tokens by (joined with OR)."""

    token_id: FieldValue = None
    user_id: FieldValue = None
    token: FieldValue = None


@dataclass
class UserResult:
    status: ResultStatus
    users: list[User] = field(default_factory=list)


@dataclass
class TokenResult:
    status: ResultStatus
    tokens: list[EmailVerificationToken] = field(default_factory=list)


@dataclass
class RegistrationResult:
    """
    Outcome of a registration attempt.

    On partial failure (user persisted, verification not delivered) the
    status is the failing sub-step's status, `user` carries the created
    account and `message` explains what is missing.
    """

    status: ResultStatus
    user: User | None = None
    conflicting_user: User | None = None
    token: EmailVerificationToken | None = None
    message: str | None = None


@dataclass
class VerificationResult:
    """Outcome of issuing or consuming a verification token."""

    status: ResultStatus
    user: User | None = None
    token: EmailVerificationToken | None = None
    message: str | None = None
