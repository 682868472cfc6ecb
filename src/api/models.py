"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Response models never expose the password hash.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.models import RegistrationResult, User, VerificationResult
from src.adapters.security.bcrypt_hasher import MAX_PASSWORD_BYTES
from src.domain.result import ResultStatus


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    username: str = Field(..., min_length=1, max_length=64, description="Unique username")
    email: str = Field(..., description="Email address to verify")
    password: str = Field(..., min_length=2, description="User password (min 2 characters)")

    @field_validator("email")
    @classmethod
    def email_has_at_in_the_middle(cls, value: str) -> str:
        at = value.find("@")
        if at < 1 or at == len(value) - 1:
            raise ValueError("email needs an @ in the middle")
        return value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class UserResponse(BaseModel):
    """Public projection of a user."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    email: str
    email_validated: bool
    created: datetime | None = None
    updated: datetime | None = None

    @classmethod
    def from_user(cls, user: User | None) -> "UserResponse | None":
        return cls.model_validate(user.to_public()) if user is not None else None


class RegisterResponse(BaseModel):
    """Response model for a registration attempt."""

    status: ResultStatus
    message: str | None = None
    user: UserResponse | None = None
    conflicting_user: UserResponse | None = None

    @classmethod
    def from_result(cls, result: RegistrationResult) -> "RegisterResponse":
        return cls(
            status=result.status,
            message=result.message,
            user=UserResponse.from_user(result.user),
            conflicting_user=UserResponse.from_user(result.conflicting_user),
        )


class VerificationResponse(BaseModel):
    """Response model for verification and resend requests."""

    status: ResultStatus
    message: str | None = None
    user: UserResponse | None = None

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResponse":
        return cls(
            status=result.status,
            message=result.message,
            user=UserResponse.from_user(result.user),
        )


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    status: ResultStatus
    message: str
    validation_errors: list[FieldError] = Field(default_factory=list)
