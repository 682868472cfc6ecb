"""
Registration domain service - Account creation and email verification.

Registration flow
=================

    duplicate check -> password hashing -> persist user -> issue token -> send mail

1. Duplicate check: any user matching the username OR the email ends the
   flow with CONFLICT, carrying the first conflicting row.
2. A missing password ends the flow with INVALID before anything is written.
3. The user row is inserted. A non-CREATED status is returned as is.
   A unique violation raised by the store means a concurrent registration
   slipped past its own duplicate check. It is reported as CONFLICT.
4. A verification token is stored and mailed. Failure here does NOT roll
   the user back: the sub-step status is forwarded together with the
   created user so the caller can resend just the email.

User creation and mail delivery are not atomic. send_verification() can
be invoked again for an existing user. Each call issues a fresh token and
leaves older tokens valid.

Verification
============

verify_email() runs outside the registration flow. It looks the token up,
marks the owner as validated and then deletes every outstanding token of
that user. The two writes are independent:
- update fails (user gone): INVALID, tokens are left untouched
- token cleanup raises: SUCCESS with a message, leftovers expire via sweep
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from html import escape

from .exceptions import DuplicateRecordError, RepositoryError
from .models import (
    RegistrationResult,
    TokenCriteria,
    TokenResult,
    User,
    UserCriteria,
    VerificationResult,
)
from .ports import (
    EmailVerificationTokenStore,
    MailMessage,
    MailSender,
    PasswordHasher,
    UserRepository,
)
from .result import ResultStatus, is_successful

logger = logging.getLogger(__name__)

VERIFICATION_FAILED_MESSAGE = "Failed to send verification email"


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the user repository, the verification-token store and
    the mail transport. Holds no state of its own.
    """

    users: UserRepository
    tokens: EmailVerificationTokenStore
    mail_sender: MailSender
    password_hasher: PasswordHasher
    verification_base_url: str = "https://sample.com"
    token_bytes: int = 48
    token_max_age_hours: int = 24

    async def register(
        self, username: str | None, email: str | None, password: str | None
    ) -> RegistrationResult:
        """
        Register a new user and send them a verification link.

        Args:
            username: Requested username
            email: User's email address
            password: Plaintext password (hashed before storage)

        Returns:
            CREATED with the user on success, CONFLICT with the conflicting
            user, INVALID on missing input, or the failing sub-step status
            with the created user when verification could not be delivered

        Raises:
            RepositoryError: on infrastructure failure while persisting the user
        """
        existing = await self.users.get(UserCriteria(username=username, email=email))
        if existing.status is ResultStatus.INVALID:
            return RegistrationResult(
                status=ResultStatus.INVALID, message="username or email is required"
            )
        if existing.users:
            return RegistrationResult(
                status=ResultStatus.CONFLICT, conflicting_user=existing.users[0]
            )

        if not password:
            return RegistrationResult(status=ResultStatus.INVALID, message="password is required")
        # hashing runs in a worker thread, never on the event loop
        password_hash = await asyncio.to_thread(self.password_hasher.hash, password)

        try:
            created = await self.users.create(username, email, password_hash)
        except DuplicateRecordError:
            logger.info("Concurrent registration detected for username=%s email=%s", username, email)
            return await self._conflict(username, email)
        if created.status is not ResultStatus.CREATED:
            return RegistrationResult(status=created.status)
        user = created.users[0]

        verification = await self.send_verification(user)
        if not is_successful(verification.status):
            return RegistrationResult(
                status=verification.status,
                user=user,
                token=verification.token,
                message=VERIFICATION_FAILED_MESSAGE,
            )

        logger.info("Registered user %s", user.user_id)
        return RegistrationResult(status=created.status, user=user, token=verification.token)

    async def send_verification(self, user: User) -> VerificationResult:
        """
        Issue a new verification token for `user` and mail the link.

        Safe to call repeatedly: every call stores one more token and
        earlier tokens stay valid until consumed or swept.

        Returns:
            CREATED with the token record, or the failing sub-step status
        """
        token = self._generate_token()
        try:
            issued = await self.tokens.create_token(user.user_id, token)
        except RepositoryError:
            logger.exception("Failed to store verification token for user %s", user.user_id)
            return VerificationResult(
                status=ResultStatus.FAILED, user=user, message=VERIFICATION_FAILED_MESSAGE
            )
        if not is_successful(issued.status):
            return VerificationResult(
                status=issued.status, user=user, message=VERIFICATION_FAILED_MESSAGE
            )
        record = issued.tokens[0]

        outcome = await self.mail_sender.send(self._verification_message(user, record.token))
        if not is_successful(outcome.status):
            logger.warning("Verification email to %s was not accepted", user.email)
            return VerificationResult(
                status=outcome.status,
                user=user,
                token=record,
                message=VERIFICATION_FAILED_MESSAGE,
            )

        return VerificationResult(status=issued.status, user=user, token=record)

    async def resend_verification(self, user_id: str | None) -> VerificationResult:
        """Send a fresh verification link to an existing, unvalidated user."""
        found = await self.users.get(UserCriteria(user_id=user_id))
        if not found.users:
            return VerificationResult(status=ResultStatus.INVALID, message="Unknown user")
        user = found.users[0]
        if user.email_validated:
            return VerificationResult(
                status=ResultStatus.SUCCESS, user=user, message="Email already verified"
            )
        return await self.send_verification(user)

    async def verify_email(self, token: str | None) -> VerificationResult:
        """
        Consume a verification token.

        Marks the owning user as validated, then deletes all of that
        user's outstanding tokens. Validating an already validated user
        still succeeds.

        Returns:
            SUCCESS with the updated user, INVALID for an unknown token or
            a token whose user no longer exists
        """
        if not token:
            return VerificationResult(status=ResultStatus.INVALID, message="token is required")

        found = await self.tokens.get_tokens(TokenCriteria(token=token))
        if not found.tokens:
            return VerificationResult(
                status=ResultStatus.INVALID, message="Unknown verification token"
            )
        record = found.tokens[0]

        updated = await self.users.update(record.user_id, email_validated=True)
        if updated.status is not ResultStatus.SUCCESS:
            return VerificationResult(
                status=updated.status,
                token=record,
                message="User for verification token no longer exists",
            )
        user = updated.users[0]

        try:
            await self.tokens.delete_token(TokenCriteria(user_id=user.user_id))
        except RepositoryError:
            logger.exception("Failed to remove verification tokens for user %s", user.user_id)
            return VerificationResult(
                status=ResultStatus.SUCCESS,
                user=user,
                token=record,
                message="Email verified; failed to remove verification tokens",
            )

        logger.info("Verified email for user %s", user.user_id)
        return VerificationResult(status=ResultStatus.SUCCESS, user=user, token=record)

    async def purge_expired_tokens(self, max_age_hours: int | None = None) -> TokenResult:
        """Sweep verification tokens older than `max_age_hours` (default: configured age)."""
        hours = self.token_max_age_hours if max_age_hours is None else max_age_hours
        result = await self.tokens.sweep_expired(hours)
        logger.info("Swept %d expired verification token(s)", len(result.tokens))
        return result

    async def _conflict(self, username: str | None, email: str | None) -> RegistrationResult:
        lookup = await self.users.get(UserCriteria(username=username, email=email))
        return RegistrationResult(
            status=ResultStatus.CONFLICT,
            conflicting_user=lookup.users[0] if lookup.users else None,
            message="username or email already registered",
        )

    def _generate_token(self) -> str:
        """
        Generate an opaque, URL-safe verification token.

        Uses secrets module for cryptographic randomness.
        """
        return secrets.token_urlsafe(self.token_bytes)

    def verification_link(self, token: str) -> str:
        return f"{self.verification_base_url.rstrip('/')}/verify/{token}"

    def _verification_message(self, user: User, token: str) -> MailMessage:
        link = self.verification_link(token)
        text = (
            f"Dearest {user.username},\n"
            "\n"
            "We are overjoyed to have you register. "
            "Please follow the link to verify your email address.\n"
            "\n"
            f"{link}\n"
            "\n"
            "Have a great day.\n"
            "The Sample App team."
        )
        html = (
            f"<p>Dearest {escape(user.username)},</p>"
            "<p>We are overjoyed to have you register. "
            "Please follow the link to verify your email address.</p>"
            f'<p><a href="{escape(link)}">{escape(link)}</a></p>'
            "<p>Have a great day.<br>The Sample App team.</p>"
        )
        return MailMessage(to=user.email, subject="Verify your email address", text=text, html=html)
