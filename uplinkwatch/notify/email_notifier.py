"""Notification senders: SMTP email and a log-only fallback."""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Tuple

import structlog

from ..core.errors import NotificationError
from ..core.interfaces import INotifier
from ..models import (
    IpChangedPayload,
    NotificationKind,
    NotificationPayload,
    ReconnectedPayload,
    StartupPayload,
)
from ..utils.time_utils import format_duration

logger = structlog.get_logger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def render_message(app_name: str, kind: NotificationKind, payload: NotificationPayload) -> Tuple[str, str]:
    """
    Build the subject and plain-text body for a notification.

    Args:
        app_name: Name of this watchdog instance
        kind: Notification kind
        payload: Payload matching the kind

    Returns:
        Tuple of (subject, body)

    Raises:
        NotificationError: If the payload does not match the kind
    """
    when = payload.occurred_at.strftime(_TIMESTAMP_FORMAT)

    if kind == NotificationKind.STARTUP and isinstance(payload, StartupPayload):
        subject = f"Server {app_name} started"
        body = (
            f"Server {app_name} started successfully.\n\n"
            f"Status: Running\n"
            f"Startup cause: {payload.cause.description}\n"
            f"External IP: {payload.ip}\n"
            f"Date/Time: {when}\n\n"
            f"The service is monitoring the internet connection."
        )
    elif kind == NotificationKind.RECONNECTED and isinstance(payload, ReconnectedPayload):
        subject = f"Connection restored - {app_name}"
        body = (
            f"Internet connection restored.\n\n"
            f"External IP: {payload.ip}\n"
            f"Outage duration: {format_duration(payload.outage_duration)}\n"
            f"Restored at: {when}\n\n"
            f"The service keeps monitoring the connection."
        )
    elif kind == NotificationKind.IP_CHANGED and isinstance(payload, IpChangedPayload):
        subject = f"External IP changed - {app_name}"
        body = (
            f"The external IP address changed.\n\n"
            f"Previous IP: {payload.old_ip}\n"
            f"New IP: {payload.new_ip}\n"
            f"Detected at: {when}"
        )
    else:
        raise NotificationError(f"Payload {type(payload).__name__} does not match kind {kind.value}")

    return subject, body


class EmailNotifier(INotifier):
    """Sends notifications as plain-text email over SMTP with STARTTLS."""

    def __init__(
        self,
        app_name: str,
        host: str,
        port: int,
        user: str,
        password: str,
        to: str,
        timeout: float = 30.0,
    ):
        """
        Initialize the EmailNotifier.

        Args:
            app_name: Name used in subjects and bodies
            host: SMTP server host
            port: SMTP server port
            user: SMTP login, also used as the sender address
            password: SMTP password
            to: Recipient address
            timeout: SMTP connection timeout in seconds
        """
        self._app_name = app_name
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._to = to
        self._timeout = timeout

    async def send(self, kind: NotificationKind, payload: NotificationPayload) -> None:
        subject, body = render_message(self._app_name, kind, payload)
        message = self._build_message(subject, body)

        logger.info(f"Sending email to {self._to}: {subject}")
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Error sending email: {e}") from e
        logger.info(f"Email sent to {self._to}")

    def _build_message(self, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._user
        message["To"] = self._to
        message["Subject"] = subject
        message.set_content(body, charset="utf-8")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            server.starttls()
            server.login(self._user, self._password)
            server.send_message(message)


class LogNotifier(INotifier):
    """Writes notifications to the log instead of delivering them."""

    def __init__(self, app_name: str):
        self._app_name = app_name

    async def send(self, kind: NotificationKind, payload: NotificationPayload) -> None:
        subject, body = render_message(self._app_name, kind, payload)
        logger.info(f"Notification: {subject}", kind=kind.value, body=body)
