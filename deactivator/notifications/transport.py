"""Mail transport settings resolved once per dispatcher.

:meth:`TransportConfig.resolve` reads the global mail configuration from an
injected :class:`MailSettingsProvider`, decides whether mail is enabled and,
if so, assembles an immutable :class:`MailSession` (transport properties plus
an optional authenticator). Resolution never touches the network.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Protocol, Union

from deactivator.logging import get_logger

logger = get_logger(__name__, component="transport")

DEFAULT_PORT = "25"
DEFAULT_SSL_PORT = "465"
TIMEOUT_MS = "60000"
SSL_SOCKET_FACTORY = "ssl.SSLContext"

PROP_HOST = "mail.smtp.host"
PROP_PORT = "mail.smtp.port"
PROP_AUTH = "mail.smtp.auth"
PROP_TIMEOUT = "mail.smtp.timeout"
PROP_CONNECTION_TIMEOUT = "mail.smtp.connectiontimeout"
PROP_SOCKET_FACTORY_PORT = "mail.smtp.socketFactory.port"
PROP_SOCKET_FACTORY_CLASS = "mail.smtp.socketFactory.class"
PROP_SOCKET_FACTORY_FALLBACK = "mail.smtp.socketFactory.fallback"


class MailSettingsProvider(Protocol):
    """Source of the global mail-server configuration."""

    smtp_host: Optional[str]
    smtp_port: Optional[Union[str, int]]
    smtp_user: Optional[str]
    smtp_pass: Optional[str]
    use_ssl: bool
    reply_to_address: Optional[str]


class PasswordCredentials(NamedTuple):
    user: str
    password: Optional[str]


@dataclass(frozen=True)
class MailAuthenticator:
    """Captured SMTP credentials, handed out on every authentication challenge."""

    user: str
    password: Optional[str] = field(default=None, repr=False)

    def get_credentials(self) -> PasswordCredentials:
        return PasswordCredentials(self.user, self.password)


def build_authenticator(
    user: Optional[str], password: Optional[str]
) -> Optional[MailAuthenticator]:
    """Return an authenticator for ``user``, or None when no user is configured."""
    if not user:
        return None
    return MailAuthenticator(user=user, password=password)


@dataclass(frozen=True)
class MailSession:
    """Immutable SMTP session settings shared by every send of a dispatcher.

    Holds no per-call state, so one session can be reused by several
    dispatchers.
    """

    properties: Mapping[str, str]
    authenticator: Optional[MailAuthenticator] = None
    use_ssl: bool = False

    @property
    def host(self) -> str:
        return self.properties[PROP_HOST]

    @property
    def port(self) -> int:
        return int(self.properties[PROP_PORT])

    @property
    def requires_auth(self) -> bool:
        return self.properties.get(PROP_AUTH) == "true"

    @property
    def timeout_seconds(self) -> float:
        return int(self.properties[PROP_TIMEOUT]) / 1000.0


def build_session_properties(
    host: str,
    port: Optional[str],
    use_ssl: bool,
    auth_user: Optional[str],
    base_properties: Optional[Mapping[str, str]] = None,
) -> Mapping[str, str]:
    """Assemble transport properties for an enabled mail configuration.

    ``base_properties`` are defaults layered underneath; an SSL socket-factory
    port or class already present there is left alone.

    Args:
        host: SMTP server host
        port: Explicit port, or None for the default
        use_ssl: Whether to connect over implicit SSL
        auth_user: SMTP user name; authentication is required when set
        base_properties: Optional default properties

    Returns:
        Read-only mapping of property names to string values
    """
    props = dict(base_properties or {})
    props[PROP_HOST] = host
    props[PROP_PORT] = port or DEFAULT_PORT

    if use_ssl:
        if PROP_SOCKET_FACTORY_PORT not in props:
            ssl_port = port or DEFAULT_SSL_PORT
            props[PROP_PORT] = ssl_port
            props[PROP_SOCKET_FACTORY_PORT] = ssl_port
        props.setdefault(PROP_SOCKET_FACTORY_CLASS, SSL_SOCKET_FACTORY)
        props[PROP_SOCKET_FACTORY_FALLBACK] = "false"

    if auth_user:
        props[PROP_AUTH] = "true"

    props[PROP_TIMEOUT] = TIMEOUT_MS
    props[PROP_CONNECTION_TIMEOUT] = TIMEOUT_MS

    return MappingProxyType(props)


@dataclass(frozen=True)
class TransportConfig:
    """Snapshot of the mail transport settings.

    Mail is enabled only when both a host and a reply-to address are
    configured; ``session`` is set exactly when mail is enabled.
    """

    host: Optional[str] = None
    port: Optional[str] = None
    auth_user: Optional[str] = None
    auth_password: Optional[str] = field(default=None, repr=False)
    use_ssl: bool = False
    reply_to: Optional[str] = None
    enabled: bool = False
    session: Optional[MailSession] = None

    @classmethod
    def resolve(
        cls,
        provider: MailSettingsProvider,
        base_properties: Optional[Mapping[str, str]] = None,
    ) -> "TransportConfig":
        """Read the mail settings once and build the session if mail is enabled.

        A configuration without host or reply-to address resolves to a
        disabled transport; that is not an error.

        Args:
            provider: Global mail configuration
            base_properties: Optional default transport properties

        Returns:
            Fully populated TransportConfig
        """
        host = provider.smtp_host
        port = str(provider.smtp_port) if provider.smtp_port else None
        auth_user = provider.smtp_user
        auth_password = provider.smtp_pass
        use_ssl = bool(provider.use_ssl)
        reply_to = provider.reply_to_address

        enabled = bool(host) and bool(reply_to)
        session = None

        if enabled:
            properties = build_session_properties(
                host, port, use_ssl, auth_user, base_properties
            )
            session = MailSession(
                properties=properties,
                authenticator=build_authenticator(auth_user, auth_password),
                use_ssl=use_ssl,
            )
            logger.info(
                f"Mail transport configured for {host}:{properties[PROP_PORT]}",
                extra={
                    "event": "transport.resolved",
                    "smtp_host": host,
                    "smtp_port": properties[PROP_PORT],
                    "use_ssl": use_ssl,
                    "auth": bool(auth_user),
                },
            )
        else:
            logger.info(
                "Mail transport not configured, notifications disabled",
                extra={
                    "event": "transport.disabled",
                    "has_host": bool(host),
                    "has_reply_to": bool(reply_to),
                },
            )

        return cls(
            host=host,
            port=port,
            auth_user=auth_user,
            auth_password=auth_password,
            use_ssl=use_ssl,
            reply_to=reply_to,
            enabled=enabled,
            session=session,
        )

    @property
    def resolved_port(self) -> Optional[str]:
        """Port the session will connect to, or None when mail is disabled."""
        if self.session is None:
            return None
        return self.session.properties[PROP_PORT]
