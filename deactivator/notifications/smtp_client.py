"""SMTP client wrapper for email delivery.

This module provides a thin wrapper around Python's smtplib that connects
according to a resolved :class:`MailSession` (plain or implicit SSL, optional
authentication, fixed timeout) and a strict address-list parser for
recipient strings.
"""

import re
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import getaddresses
from typing import Callable, Iterable, List, Optional

from email_validator import EmailNotValidError, validate_email

from .models import DeliveryError, InvalidRecipientError
from .transport import MailSession

_EMPTY_ELEMENTS = re.compile(r",\s*(?=,|$)")


class SMTPClient:
    """Wrapper around smtplib for sending one message per connection.

    Designed to be easily mockable for testing: both connection factories
    can be injected.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        """Initialize SMTP client with optional factory injection.

        Args:
            smtp_factory: Factory for SMTP instances (for mocking)
            smtp_ssl_factory: Factory for SMTP_SSL instances (for mocking)
        """
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, message: EmailMessage, session: MailSession) -> None:
        """Send an email message over a fresh SMTP connection.

        Args:
            message: Fully constructed EmailMessage to send
            session: Resolved mail session (host, port, SSL, credentials)

        Raises:
            DeliveryError: If the connection, authentication or delivery fails
        """
        smtp = None
        try:
            if session.use_ssl:
                context = ssl.create_default_context()
                smtp = self.smtp_ssl_factory(
                    session.host,
                    session.port,
                    timeout=session.timeout_seconds,
                    context=context,
                )
            else:
                smtp = self.smtp_factory(
                    session.host, session.port, timeout=session.timeout_seconds
                )

            if session.authenticator is not None:
                credentials = session.authenticator.get_credentials()
                smtp.login(credentials.user, credentials.password or "")

            smtp.send_message(message)

        except smtplib.SMTPAuthenticationError as e:
            raise DeliveryError(f"SMTP authentication rejected: {e}") from e
        except smtplib.SMTPException as e:
            raise DeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise DeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError):
                    # Message already handed over or connection already gone
                    pass


def parse_recipients(value: Optional[str]) -> List[str]:
    """Parse an RFC 5322 address list into validated addresses.

    Entries may carry display names (``Ops Team <ops@example.com>``), including
    quoted names with commas (``"Doe, Jane" <jane@example.com>``); only the
    address part is returned, normalized by email-validator. Empty list
    elements are ignored.

    Args:
        value: Address list string; None or blank yields an empty list

    Returns:
        List of validated email addresses, in input order

    Raises:
        InvalidRecipientError: If any entry is not a valid address
    """
    if not value or not value.strip():
        return []

    # Empty elements (",," or a trailing comma) carry no address
    cleaned = _EMPTY_ELEMENTS.sub("", value.strip()).lstrip(", ")
    if not cleaned:
        return []

    recipients = []
    for _, address in getaddresses([cleaned]):
        if not address:
            raise InvalidRecipientError(
                f"Invalid recipient address list '{value}': unparsable entry"
            )
        try:
            validated = validate_email(address, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidRecipientError(
                f"Invalid recipient address '{address}': {e}"
            ) from e
        recipients.append(validated.normalized)

    return recipients


def merge_recipients(*sources: Iterable[str]) -> List[str]:
    """Concatenate recipient lists, dropping case-insensitive duplicates.

    The first occurrence of an address wins and order is preserved.
    """
    merged: List[str] = []
    seen = set()
    for source in sources:
        for address in source:
            key = address.lower()
            if key in seen:
                continue
            seen.add(key)
            merged.append(address)
    return merged
