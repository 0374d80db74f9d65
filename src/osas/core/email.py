"""
Email Service using Resend

Handles transactional email: application status updates and password
reset links. Sending never raises; failures are logged and reported as
False so the triggering request is never failed by email delivery.
"""

import asyncio
import logging
from html import escape

import resend

from osas.core.config import settings

logger = logging.getLogger(__name__)

_BASE_STYLE = """
            body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
            .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
            .header { color: #1a365d; margin-bottom: 24px; }
            .button { display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
            .status { display: inline-block; padding: 4px 12px; border-radius: 6px; background-color: #f3f4f6; font-weight: 600; }
            .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


def _render(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_BASE_STYLE}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">{title}</h1>
            {body}
            <div class="footer">
                <p>Regards,<br>OSAS Scholarship Team</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if the email was sent (or logged when no API key is configured)
    """
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    resend.api_key = settings.resend_api_key

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_application_status_update(
    to_email: str,
    first_name: str,
    scholarship_title: str,
    status: str,
) -> bool:
    """Notify a student that staff changed their application status."""
    safe_first_name = escape(first_name)
    safe_title = escape(scholarship_title)
    safe_status = escape(status)

    body = f"""
            <p>Hi {safe_first_name},</p>

            <p>Your application for <strong>{safe_title}</strong> has been updated to:
            <span class="status">{safe_status}</span></p>

            <p>If you have any questions, please contact the scholarship office.</p>
    """
    return await send_email(
        to_email=to_email,
        subject="Your Scholarship Application Status Update",
        html_content=_render("Application Status Update", body),
    )


async def send_password_reset(
    to_email: str,
    first_name: str,
    token: str,
    expires_minutes: int,
) -> bool:
    """Send a password reset link to a student."""
    safe_first_name = escape(first_name)
    reset_url = f"{settings.frontend_url}/reset-password?token={token}"

    body = f"""
            <p>Hi {safe_first_name},</p>

            <p>We received a request to reset your password. Click the button below to choose a new one:</p>

            <a href="{reset_url}" class="button">Reset Password</a>

            <p>Or copy and paste this link into your browser:</p>
            <p style="word-break: break-all; color: #3b82f6;">{reset_url}</p>

            <p><strong>This link expires in {expires_minutes} minutes.</strong></p>

            <p>If you didn't request a password reset, you can safely ignore this email.</p>
    """
    return await send_email(
        to_email=to_email,
        subject="Reset your OSAS password",
        html_content=_render("Password Reset", body),
    )


async def send_staff_account_status(
    to_email: str,
    first_name: str,
    status: str,
) -> bool:
    """Tell a staff member their account was approved or declined."""
    safe_first_name = escape(first_name)
    safe_status = escape(status)

    body = f"""
            <p>Hi {safe_first_name},</p>

            <p>Your OSAS staff account is now <span class="status">{safe_status}</span>.</p>

            <p>Sign in with your Google account to continue.</p>
    """
    return await send_email(
        to_email=to_email,
        subject="Your OSAS staff account status",
        html_content=_render("Staff Account Update", body),
    )
