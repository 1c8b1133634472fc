"""Notifications - transactional email, isolated from state transitions."""

from studioreg.notifications.client import EmailClient
from studioreg.notifications.dispatcher import NotificationDispatcher
from studioreg.notifications.exceptions import NotificationError
from studioreg.notifications.models import Notification, NotificationResult

__all__ = [
    "EmailClient",
    "Notification",
    "NotificationDispatcher",
    "NotificationError",
    "NotificationResult",
]
