"""
Domain layer - Pure business logic with zero framework imports.

This package contains the user account model, the result-status
protocol, the condition builder used by every lookup, and the
registration / email-verification workflow. It defines its own port
interfaces so storage and mail transports stay swappable.
"""

from .conditions import Condition, Operator, build_conditions
from .exceptions import DuplicateRecordError, RepositoryError
from .models import (
    EmailVerificationToken,
    RegistrationResult,
    TokenCriteria,
    TokenResult,
    User,
    UserCriteria,
    UserResult,
    VerificationResult,
)
from .ports import (
    EmailVerificationTokenStore,
    MailMessage,
    MailOutcome,
    MailSender,
    PasswordHasher,
    UserRepository,
)
from .registration import RegistrationService
from .result import ResultStatus, is_successful, to_http_status

__all__ = [
    "Condition",
    "DuplicateRecordError",
    "EmailVerificationToken",
    "EmailVerificationTokenStore",
    "MailMessage",
    "MailOutcome",
    "MailSender",
    "Operator",
    "PasswordHasher",
    "RegistrationResult",
    "RegistrationService",
    "RepositoryError",
    "ResultStatus",
    "TokenCriteria",
    "TokenResult",
    "User",
    "UserCriteria",
    "UserRepository",
    "UserResult",
    "VerificationResult",
    "build_conditions",
    "is_successful",
    "to_http_status",
]
