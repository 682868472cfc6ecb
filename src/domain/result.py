"""
Result status protocol - Shared outcome vocabulary for every core operation.

Expected business outcomes (bad input, conflicts, empty matches) are
reported through ResultStatus instead of exceptions. Only infrastructure
failures are raised.

Consumption sites match exhaustively over the enum, so adding a status
means touching to_http_status() and is_successful() as well.
"""

from enum import Enum
from typing import assert_never


class ResultStatus(str, Enum):
    """Outcome tag returned by repositories, token store and workflows."""

    INVALID = "INVALID"
    CONFLICT = "CONFLICT"
    CREATED = "CREATED"
    SUCCESS = "SUCCESS"
    DELETED = "DELETED"
    FAILED = "FAILED"


def to_http_status(status: ResultStatus) -> int:
    """Map a result status to the HTTP status code a transport must use."""
    match status:
        case ResultStatus.CREATED:
            return 201
        case ResultStatus.SUCCESS | ResultStatus.DELETED:
            return 200
        case ResultStatus.INVALID:
            return 400
        case ResultStatus.CONFLICT:
            return 409
        case ResultStatus.FAILED:
            return 500
        case _:
            assert_never(status)


def is_successful(status: ResultStatus) -> bool:
    """False only for INVALID, CONFLICT and FAILED."""
    match status:
        case ResultStatus.INVALID | ResultStatus.CONFLICT | ResultStatus.FAILED:
            return False
        case ResultStatus.CREATED | ResultStatus.SUCCESS | ResultStatus.DELETED:
            return True
        case _:
            assert_never(status)
