"""NotificationDispatcher - isolates email failures from registration state changes."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Protocol

from studioreg.logging import sanitize_for_log
from studioreg.notifications.exceptions import NotificationError
from studioreg.notifications.models import NotificationResult

if TYPE_CHECKING:
    from studioreg.notifications.models import Notification

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "email delivery is not configured"


class EmailSender(Protocol):
    """Interface for the email transport."""

    def send(self, notification: Notification) -> None:
        """Deliver one message or raise NotificationError."""
        ...


class NotificationDispatcher:
    """Sends notifications without ever failing the caller.

    ``send`` reports the outcome as a NotificationResult; ``send_in_background``
    hands the message to a worker thread and returns immediately.
    """

    def __init__(self, sender: EmailSender | None = None, max_workers: int = 2) -> None:
        """Initialize the dispatcher.

        Args:
            sender: Email transport; None disables delivery.
            max_workers: Threads used for background sends.
        """
        self.sender = sender
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="studioreg-mail"
        )

    def send(self, notification: Notification) -> NotificationResult:
        """Send now and report the outcome.

        Args:
            notification: The message to deliver.

        Returns:
            NotificationResult with ``sent=False`` and an error string on failure.
        """
        if self.sender is None:
            logger.info("Skipping '%s' email: %s", notification.subject, NOT_CONFIGURED)
            return NotificationResult(sent=False, error=NOT_CONFIGURED)

        try:
            self.sender.send(notification)
        except NotificationError as e:
            error = sanitize_for_log(str(e))
            logger.warning("Email '%s' failed: %s", notification.subject, error)
            return NotificationResult(sent=False, error=error)
        except Exception as e:
            error = sanitize_for_log(str(e))
            logger.exception("Unexpected error sending email '%s'", notification.subject)
            return NotificationResult(sent=False, error=error)

        logger.info("Email '%s' sent", notification.subject)
        return NotificationResult(sent=True)

    def send_in_background(self, notification: Notification) -> Future[NotificationResult]:
        """Queue a send on the worker pool (fire-and-forget)."""
        return self._executor.submit(self.send, notification)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool, optionally waiting for queued sends."""
        self._executor.shutdown(wait=wait)
