"""Notification utilities - email."""

from src.portal.core.notifications.email import send_credential_reset_email

__all__ = [
    "send_credential_reset_email",
]
