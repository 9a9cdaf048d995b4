"""Email client using Resend API."""

import html
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError

import resend

from src.portal.core.config import get_settings
from src.portal.core.logging import get_logger

logger = get_logger(__name__)

# Thread pool for email sending with timeout support
_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")

_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #15803d; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_LINK_STYLE = "color: #15803d; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


def send_credential_reset_email(to: str, token: str, user_name: str) -> bool:
    """Send a link that lets the account holder choose their own password.

    Args:
        to: Recipient email address
        token: Reset token (plaintext, included in URL)
        user_name: Display name for personalization

    Returns:
        True if email was sent (or logged in dev mode), False on error
    """
    settings = get_settings()
    reset_url = f"{settings.app_url}/reset-password?token={token}"

    if not settings.resend_api_key:
        logger.warning(
            "RESEND_API_KEY not set - email not sent",
            to=to,
            email_type="credential_reset",
        )
        return True

    resend.api_key = settings.resend_api_key

    def _send() -> None:
        resend.Emails.send(
            {
                "from": settings.email_from,
                "to": [to],
                "subject": f"Set your {settings.app_name} password",
                "html": _get_credential_reset_html(user_name, reset_url, settings.app_name),
            }
        )

    try:
        future = _email_executor.submit(_send)
        future.result(timeout=settings.email_send_timeout_seconds)
        logger.info("Credential reset email sent", to=to)
        return True
    except FuturesTimeoutError:
        logger.error("Email send timed out", to=to, timeout=settings.email_send_timeout_seconds)
        return False
    except Exception as e:
        logger.error("Failed to send credential reset email", to=to, error=str(e))
        return False


def _get_credential_reset_html(user_name: str, reset_url: str, app_name: str) -> str:
    """Generate HTML content for the credential reset email."""
    safe_user_name = html.escape(user_name)
    safe_app_name = html.escape(app_name)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #15803d; margin-bottom: 24px;">Welcome to {safe_app_name}</h1>
    <p>Hi {safe_user_name},</p>
    <p>An account has been created for you. Choose your password to sign in:</p>
    <p style="margin: 32px 0;">
        <a href="{reset_url}" style="{_BUTTON_STYLE}">Set Password</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{reset_url}" style="{_LINK_STYLE}">{reset_url}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        If you did not expect this email, you can safely ignore it.
    </p>
</body>
</html>"""
