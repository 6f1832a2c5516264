"""Tests for notification rendering and delivery."""

import smtplib
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from uplinkwatch.core.errors import NotificationError
from uplinkwatch.models import (
    IpChangedPayload,
    NotificationKind,
    ReconnectedPayload,
    StartupCause,
    StartupPayload,
)
from uplinkwatch.notify.email_notifier import EmailNotifier, LogNotifier, render_message
from uplinkwatch.utils.time_utils import format_duration

WHEN = datetime(2026, 3, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def email_notifier():
    return EmailNotifier(
        app_name="edge-01",
        host="smtp.example.com",
        port=587,
        user="watch@example.com",
        password="secret",
        to="ops@example.com",
    )


def test_render_startup_message():
    payload = StartupPayload(ip="203.0.113.5", cause=StartupCause.POWER_LOSS, occurred_at=WHEN)

    subject, body = render_message("edge-01", NotificationKind.STARTUP, payload)

    assert subject == "Server edge-01 started"
    assert "Startup cause: Power loss" in body
    assert "External IP: 203.0.113.5" in body
    assert "2026-03-01 12:30:00" in body


def test_render_reconnected_message():
    payload = ReconnectedPayload(ip="203.0.113.5", outage_duration=timedelta(minutes=4, seconds=7), occurred_at=WHEN)

    subject, body = render_message("edge-01", NotificationKind.RECONNECTED, payload)

    assert subject == "Connection restored - edge-01"
    assert "Outage duration: 4 minutes and 7 seconds" in body


def test_render_ip_changed_message():
    payload = IpChangedPayload(old_ip="203.0.113.5", new_ip="203.0.113.6", occurred_at=WHEN)

    subject, body = render_message("edge-01", NotificationKind.IP_CHANGED, payload)

    assert subject == "External IP changed - edge-01"
    assert "Previous IP: 203.0.113.5" in body
    assert "New IP: 203.0.113.6" in body


def test_render_rejects_mismatched_payload():
    payload = IpChangedPayload(old_ip="a", new_ip="b")

    with pytest.raises(NotificationError):
        render_message("edge-01", NotificationKind.STARTUP, payload)


def test_format_duration():
    assert format_duration(timedelta(seconds=59)) == "0 minutes and 59 seconds"
    assert format_duration(timedelta(hours=1, seconds=5)) == "60 minutes and 5 seconds"
    assert format_duration(timedelta(seconds=-3)) == "0 minutes and 0 seconds"


@pytest.mark.asyncio
async def test_email_notifier_sends_over_starttls(email_notifier):
    payload = StartupPayload(ip="203.0.113.5", occurred_at=WHEN)

    with patch("uplinkwatch.notify.email_notifier.smtplib.SMTP") as smtp_cls:
        await email_notifier.send(NotificationKind.STARTUP, payload)

    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30.0)
    server = smtp_cls.return_value.__enter__.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("watch@example.com", "secret")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "ops@example.com"
    assert message["From"] == "watch@example.com"
    assert message["Subject"] == "Server edge-01 started"


@pytest.mark.asyncio
async def test_email_notifier_wraps_smtp_errors(email_notifier):
    payload = StartupPayload(ip="203.0.113.5")

    with patch("uplinkwatch.notify.email_notifier.smtplib.SMTP") as smtp_cls:
        smtp_cls.side_effect = smtplib.SMTPConnectError(421, "unavailable")
        with pytest.raises(NotificationError):
            await email_notifier.send(NotificationKind.STARTUP, payload)


@pytest.mark.asyncio
async def test_email_notifier_wraps_connection_errors(email_notifier):
    payload = StartupPayload(ip="203.0.113.5")

    with patch("uplinkwatch.notify.email_notifier.smtplib.SMTP") as smtp_cls:
        smtp_cls.side_effect = ConnectionRefusedError()
        with pytest.raises(NotificationError):
            await email_notifier.send(NotificationKind.STARTUP, payload)


@pytest.mark.asyncio
async def test_log_notifier_does_not_raise():
    payload = ReconnectedPayload(ip="203.0.113.5", outage_duration=timedelta(seconds=90))

    await LogNotifier("edge-01").send(NotificationKind.RECONNECTED, payload)
