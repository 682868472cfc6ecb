"""
Console mail sender adapter - Implements MailSender protocol.

This module provides a console-based implementation of the domain's
mail port, logging outgoing messages for local development.
"""

import logging

from src.domain.ports import MailMessage, MailOutcome
from src.domain.result import ResultStatus

logger = logging.getLogger(__name__)


class ConsoleMailSender:
    """
    Implements MailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Always accepts the message.
    """

    async def send(self, message: MailMessage) -> MailOutcome:
        """
        Log the message (simulates email delivery).

        The text body is logged at INFO level so the verification link is
        visible in the service logs.

        Args:
            message: Outbound email
        """
        logger.info(
            "[VERIFICATION] To: %s Subject: %s\n%s", message.to, message.subject, message.text
        )
        return MailOutcome(status=ResultStatus.SUCCESS)
