"""Notification dispatch for deactivated and deleted jobs.

This module provides the complete notification path:
- NotificationDispatcher: annotates, logs and emails for each detected job
- TransportConfig: mail transport settings resolved once per dispatcher
- SMTPClient: SMTP wrapper with implicit SSL and authentication support
- Result types and the DescriptionUpdateError / DeliveryError taxonomy
"""

from .dispatcher import NotificationDispatcher
from .models import (
    NOTIFICATION_SUBJECT,
    DeliveryError,
    DescriptionUpdateError,
    DescriptionUpdateResult,
    DispatchResult,
    InvalidRecipientError,
    NotificationError,
    NotificationEvent,
)
from .smtp_client import SMTPClient, merge_recipients, parse_recipients
from .transport import (
    MailAuthenticator,
    MailSession,
    MailSettingsProvider,
    PasswordCredentials,
    TransportConfig,
    build_authenticator,
)

__all__ = [
    # Main components
    "NotificationDispatcher",
    "TransportConfig",
    "SMTPClient",
    # Transport pieces
    "MailSession",
    "MailAuthenticator",
    "MailSettingsProvider",
    "PasswordCredentials",
    "build_authenticator",
    # Models and results
    "NOTIFICATION_SUBJECT",
    "NotificationEvent",
    "DescriptionUpdateResult",
    "DispatchResult",
    # Exceptions
    "NotificationError",
    "DescriptionUpdateError",
    "DeliveryError",
    "InvalidRecipientError",
    # Utilities
    "parse_recipients",
    "merge_recipients",
]
