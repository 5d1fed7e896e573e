"""
Outbound email over SMTP.

Sending never raises: failures are logged and reported as False so that an SMTP
outage cannot break signup or password flows.
"""
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from crosscareers.core import config

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html_body: str) -> bool:
    """Send an HTML email. Returns True on success."""
    if not config.SMTP_HOST:
        logger.warning(f"SMTP not configured, skipping email to {to}: {subject}")
        return False
    try:
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((config.FROM_NAME, config.FROM_EMAIL))
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=15) as server:
            server.starttls()
            if config.SMTP_USERNAME and config.SMTP_PASSWORD:
                server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
            server.sendmail(config.FROM_EMAIL, [to], msg.as_string())
        logger.info(f"Email sent to {to}: {subject}")
        return True
    except Exception as e:
        logger.error(f"Email to {to} failed: {e}")
        return False


def send_otp_email(to: str, first_name: str, otp: str) -> bool:
    body = (
        f"<p>Hi {html.escape(first_name)},</p>"
        f"<p>Your CrossCareers verification code is <strong>{otp}</strong>.</p>"
        f"<p>This code expires in {config.OTP_EXPIRE_MINUTES} minutes.</p>"
    )
    return send_email(to, "Verify your email", body)


def send_password_reset_email(to: str, first_name: str, reset_url: str) -> bool:
    body = (
        f"<p>Hi {html.escape(first_name)},</p>"
        f'<p>Click <a href="{reset_url}">here</a> to reset your password. '
        f"This link expires in 1 hour.</p>"
    )
    return send_email(to, "Reset your password", body)


def send_password_changed_email(to: str, first_name: str) -> bool:
    body = (
        f"<p>Hi {html.escape(first_name)},</p>"
        "<p>Your password has been reset successfully. If this wasn't you, contact support immediately.</p>"
    )
    return send_email(to, "Your password was changed", body)
