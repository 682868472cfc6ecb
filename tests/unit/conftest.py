"""
In-memory fakes of the domain ports for unit tests.

The fakes follow the repository contracts: they use build_conditions()
for lookups (OR semantics, INVALID on no usable criteria) and raise
DuplicateRecordError on unique violations like the database would.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from src.domain.conditions import Condition, Operator, build_conditions
from src.domain.exceptions import DuplicateRecordError
from src.domain.models import (
    EmailVerificationToken,
    TokenCriteria,
    TokenResult,
    User,
    UserCriteria,
    UserResult,
)
from src.domain.ports import MailMessage, MailOutcome
from src.domain.registration import RegistrationService
from src.domain.result import ResultStatus


def _matches(record: object, conditions: list[Condition]) -> bool:
    for condition in conditions:
        value = getattr(record, condition.field)
        if condition.operator is Operator.EQ and value == condition.value:
            return True
        if condition.operator is Operator.IN and value in condition.value:
            return True
    return False


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.rows: dict[str, User] = {}

    async def create(self, username, email, password_hash) -> UserResult:
        if not username or not email or not password_hash:
            return UserResult(status=ResultStatus.INVALID)
        self._check_unique(username, email)
        now = _now()
        user = User(
            user_id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            email_validated=False,
            created=now,
            updated=now,
        )
        self.rows[user.user_id] = user
        return UserResult(status=ResultStatus.CREATED, users=[user])

    async def update(
        self, user_id, *, username=None, email=None, password_hash=None, email_validated=None
    ) -> UserResult:
        changes = {
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "email_validated": email_validated,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        if not user_id or not changes or user_id not in self.rows:
            return UserResult(status=ResultStatus.INVALID)
        user = self.rows[user_id]
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated = max(_now(), user.updated + timedelta(microseconds=1))
        return UserResult(status=ResultStatus.SUCCESS, users=[user])

    async def get(self, criteria: UserCriteria) -> UserResult:
        conditions = build_conditions(criteria)
        if not conditions:
            return UserResult(status=ResultStatus.INVALID)
        users = [u for u in self.rows.values() if _matches(u, conditions)]
        return UserResult(status=ResultStatus.SUCCESS, users=users)

    async def delete(self, criteria: UserCriteria) -> UserResult:
        conditions = build_conditions(criteria)
        if not conditions:
            return UserResult(status=ResultStatus.INVALID)
        users = [u for u in self.rows.values() if _matches(u, conditions)]
        for user in users:
            del self.rows[user.user_id]
        return UserResult(status=ResultStatus.DELETED, users=users)

    async def put(
        self, *, user_id=None, username=None, email=None, password_hash=None, email_validated=None
    ) -> UserResult:
        if user_id:
            return await self.update(
                user_id,
                username=username,
                email=email,
                password_hash=password_hash,
                email_validated=email_validated,
            )
        return await self.create(username, email, password_hash)

    def _check_unique(self, username: str, email: str) -> None:
        for user in self.rows.values():
            if user.username == username or user.email == email:
                raise DuplicateRecordError("create user: users_username_key violated")


class InMemoryTokenStore:
    def __init__(self) -> None:
        self.rows: dict[str, EmailVerificationToken] = {}

    async def create_token(self, user_id, token) -> TokenResult:
        if not user_id or not token:
            return TokenResult(status=ResultStatus.INVALID)
        record = EmailVerificationToken(
            token_id=str(uuid.uuid4()), user_id=user_id, token=token, created=_now()
        )
        self.rows[record.token_id] = record
        return TokenResult(status=ResultStatus.CREATED, tokens=[record])

    async def get_tokens(self, criteria: TokenCriteria) -> TokenResult:
        conditions = build_conditions(criteria)
        if not conditions:
            return TokenResult(status=ResultStatus.INVALID)
        tokens = sorted(
            (t for t in self.rows.values() if _matches(t, conditions)),
            key=lambda t: t.created,
            reverse=True,
        )
        return TokenResult(status=ResultStatus.SUCCESS, tokens=tokens)

    async def delete_token(self, criteria: TokenCriteria) -> TokenResult:
        conditions = build_conditions(criteria)
        if not conditions:
            return TokenResult(status=ResultStatus.INVALID)
        tokens = [t for t in self.rows.values() if _matches(t, conditions)]
        for record in tokens:
            del self.rows[record.token_id]
        return TokenResult(status=ResultStatus.DELETED, tokens=tokens)

    async def sweep_expired(self, max_age_hours: int = 24) -> TokenResult:
        cutoff = _now() - timedelta(hours=max_age_hours)
        tokens = [t for t in self.rows.values() if t.created < cutoff]
        for record in tokens:
            del self.rows[record.token_id]
        return TokenResult(status=ResultStatus.DELETED, tokens=tokens)


class RecordingMailSender:
    def __init__(self, status: ResultStatus = ResultStatus.SUCCESS) -> None:
        self.status = status
        self.sent: list[MailMessage] = []

    async def send(self, message: MailMessage) -> MailOutcome:
        self.sent.append(message)
        return MailOutcome(status=self.status)


class PlainHasher:
    """Deterministic stand-in for bcrypt; keeps unit tests fast."""

    def hash(self, password: str) -> str:
        return f"hashed:{password}"


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def tokens() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def mail_sender() -> RecordingMailSender:
    return RecordingMailSender()


@pytest.fixture
def service(
    users: InMemoryUserRepository, tokens: InMemoryTokenStore, mail_sender: RecordingMailSender
) -> RegistrationService:
    return RegistrationService(
        users=users,
        tokens=tokens,
        mail_sender=mail_sender,
        password_hasher=PlainHasher(),
        verification_base_url="https://sample.com",
    )
