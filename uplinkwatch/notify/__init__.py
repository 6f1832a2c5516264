"""Notification components for the connectivity watchdog."""

from .email_notifier import EmailNotifier, LogNotifier, render_message

__all__ = ["EmailNotifier", "LogNotifier", "render_message"]
