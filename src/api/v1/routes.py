"""
API v1 routes.

Every endpoint returns the domain result status in the body and maps it
to the HTTP status code through to_http_status().
"""

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_registration_service
from src.api.models import (
    ErrorResponse,
    RegisterRequest,
    RegisterResponse,
    VerificationResponse,
)
from src.domain.registration import RegistrationService
from src.domain.result import to_http_status

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": RegisterResponse, "description": "Username or email already registered"},
        500: {"model": RegisterResponse, "description": "User created, verification email failed"},
    },
    summary="Register a new user",
    description="Create an account and send a verification link to the given email.",
)
async def register(
    request_data: RegisterRequest,
    response: Response,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new user and send a verification link.

    - **username**: Unique username
    - **email**: Address the verification link is sent to
    - **password**: Password (minimum 2 characters)
    """
    result = await service.register(
        request_data.username, request_data.email, request_data.password
    )
    response.status_code = to_http_status(result.status)
    return RegisterResponse.from_result(result)


@router.get(
    "/verify/{token}",
    response_model=VerificationResponse,
    responses={400: {"model": VerificationResponse, "description": "Unknown token"}},
    summary="Verify an email address",
)
async def verify(
    token: str,
    response: Response,
    service: RegistrationService = Depends(get_registration_service),
) -> VerificationResponse:
    """Consume the token from a verification link and mark the email as validated."""
    result = await service.verify_email(token)
    response.status_code = to_http_status(result.status)
    return VerificationResponse.from_result(result)


@router.post(
    "/users/{user_id}/verification",
    response_model=VerificationResponse,
    responses={
        400: {"model": VerificationResponse, "description": "Unknown user"},
        500: {"model": VerificationResponse, "description": "Verification email failed"},
    },
    summary="Resend the verification email",
)
async def resend_verification(
    user_id: str,
    response: Response,
    service: RegistrationService = Depends(get_registration_service),
) -> VerificationResponse:
    """Issue a fresh verification token for an unvalidated user."""
    result = await service.resend_verification(user_id)
    response.status_code = to_http_status(result.status)
    return VerificationResponse.from_result(result)
