"""Environment variable loading and validation.

Mail settings come from the environment only. Every SMTP variable is
optional: without a host and a reply-to address, mail notifications are
simply disabled.
"""

import os
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/deactivator.db"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class EnvironmentConfig:
    """Environment variable configuration holder.

    Satisfies the MailSettingsProvider protocol consumed by
    TransportConfig.resolve().
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[str] = None,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        use_ssl: bool = False,
        reply_to_address: Optional[str] = None,
        admin_notification: Optional[str] = None,
        log_level: Optional[str] = None,
        database_url: Optional[str] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.use_ssl = use_ssl
        self.reply_to_address = reply_to_address
        self.admin_notification = admin_notification
        self.log_level = log_level
        self.database_url = database_url or DEFAULT_DATABASE_URL

    @property
    def mail_configured(self) -> bool:
        """Whether both SMTP host and reply-to address are set."""
        return bool(self.smtp_host) and bool(self.reply_to_address)

    def __repr__(self) -> str:
        return (
            f"EnvironmentConfig(smtp_host={self.smtp_host!r}, smtp_port={self.smtp_port!r}, "
            f"smtp_user={self.smtp_user!r}, use_ssl={self.use_ssl!r}, "
            f"reply_to_address={self.reply_to_address!r})"
        )


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - SMTP_HOST: SMTP server hostname
    - SMTP_PORT: SMTP server port (1-65535); defaults to 25, or 465 with SSL
    - SMTP_USER: SMTP authentication username (enables authentication)
    - SMTP_PASS: SMTP authentication password
    - SMTP_USE_SSL: Connect with implicit SSL (true/false)
    - SMTP_REPLY_TO: Sender address of notifications
    - ADMIN_NOTIFICATION: Comma-separated admin recipients (overrides config file)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - DATABASE_URL: Job record database (default: sqlite:///./data/deactivator.db)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable is set to an invalid value
    """
    errors: List[str] = []

    smtp_host = _get("SMTP_HOST")
    smtp_port = _get("SMTP_PORT")
    smtp_user = _get("SMTP_USER")
    smtp_pass = _get("SMTP_PASS")
    use_ssl_str = _get("SMTP_USE_SSL")
    reply_to_address = _get("SMTP_REPLY_TO")
    admin_notification = _get("ADMIN_NOTIFICATION")
    log_level = _get("LOG_LEVEL")
    database_url = _get("DATABASE_URL")

    if smtp_port:
        try:
            port_number = int(smtp_port)
            if port_number < 1 or port_number > 65535:
                errors.append(
                    f"Invalid SMTP_PORT: {port_number}. Must be between 1 and 65535."
                )
        except ValueError:
            errors.append(f"Invalid SMTP_PORT: '{smtp_port}'. Must be a valid integer.")

    use_ssl = False
    if use_ssl_str is not None:
        normalized = use_ssl_str.lower()
        if normalized in _TRUE_VALUES:
            use_ssl = True
        elif normalized not in _FALSE_VALUES:
            errors.append(
                f"Invalid SMTP_USE_SSL: '{use_ssl_str}'. Must be true or false."
            )

    if reply_to_address and not _is_valid_email(reply_to_address):
        errors.append(f"Invalid email address format in SMTP_REPLY_TO: '{reply_to_address}'")

    if admin_notification:
        for address in admin_notification.split(","):
            address = address.strip()
            if address and not _is_valid_email(address):
                errors.append(
                    f"Invalid email address format in ADMIN_NOTIFICATION: '{address}'"
                )

    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

    if smtp_pass and not smtp_user:
        errors.append(
            "SMTP_PASS is set but SMTP_USER is not. Set SMTP_USER to enable authentication."
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the mail settings",
                "Leave SMTP_HOST or SMTP_REPLY_TO unset to disable email notifications",
                "Verify SMTP_PORT is a number between 1 and 65535",
            ],
        )

    return EnvironmentConfig(
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        use_ssl=use_ssl,
        reply_to_address=reply_to_address,
        admin_notification=admin_notification,
        log_level=log_level,
        database_url=database_url,
    )


def _get(name: str) -> Optional[str]:
    """Read a variable, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
