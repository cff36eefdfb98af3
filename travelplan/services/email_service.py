import html as html_lib
import smtplib
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional
from urllib.parse import urlencode

from email_validator import validate_email, EmailNotValidError

from travelplan.core.config import settings
from travelplan.core.logger import logger

SENDER_NAME = settings.APP_NAME
SENDER_EMAIL = settings.FROM_EMAIL

_BUTTON_STYLE = (
    "background: #667eea; color: white; padding: 15px 30px; text-decoration: none; "
    "border-radius: 5px; display: inline-block; font-weight: bold;"
)


def frontend_url(path: str, **params) -> str:
    url = f"{settings.FRONTEND_BASE_URL.rstrip('/')}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def send_email_html(to_email: str, subject: str, html: str) -> bool:
    """
    Send an HTML email over SMTP SSL.

    Without SMTP_HOST configured the message is only logged, which is what
    local development and the test-suite rely on. Returns False when the
    address is rejected; SMTP failures propagate to the caller.
    """
    try:
        validate_email(to_email, check_deliverability=False)
    except EmailNotValidError:
        logger.error(f"[Email] Invalid email format: {to_email}")
        return False

    if not settings.SMTP_HOST:
        logger.info(f"[Email] SMTP not configured, would send '{subject}' to {to_email}")
        return True

    message = MIMEMultipart("alternative")
    message["From"] = formataddr((SENDER_NAME, SENDER_EMAIL))
    message["To"] = to_email
    message["Subject"] = subject
    message.attach(MIMEText(html, "html"))

    with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
        server.sendmail(SENDER_EMAIL, [to_email], message.as_string())

    logger.info(f"[Email] '{subject}' sent to {to_email}")
    return True


def _layout(heading: str, body: str, link: str, button: str, footer: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: #667eea; padding: 40px 20px; text-align: center;">
        <h1 style="color: white; margin: 0;">{settings.APP_NAME}</h1>
      </div>
      <div style="padding: 40px 20px; background: #f8f9fa;">
        <h2 style="color: #333;">{heading}</h2>
        {body}
        <div style="text-align: center; margin: 30px 0;">
          <a href="{link}" style="{_BUTTON_STYLE}">{button}</a>
        </div>
        <p style="color: #999; font-size: 14px;">{footer}</p>
        <p style="color: #999; font-size: 12px; text-align: center;">
          If the button doesn't work, copy and paste this link into your browser:<br>
          <a href="{link}">{link}</a>
        </p>
      </div>
    </div>
    """


def send_verification_email(to_email: str, token: str) -> bool:
    link = frontend_url("/auth/verify", token=token)
    html = _layout(
        "Verify Your Email Address",
        "<p>Thanks for signing up! Please verify your email address to start planning.</p>",
        link,
        "Verify Email Address",
        "This verification link will expire in 24 hours. If you didn't create an account, "
        "you can safely ignore this email.",
    )
    return send_email_html(to_email, f"Verify your email address - {settings.APP_NAME}", html)


def send_password_reset_email(to_email: str, token: str) -> bool:
    link = frontend_url("/auth/reset-password", token=token)
    html = _layout(
        "Reset Your Password",
        "<p>You requested to reset your password. Click the button below to choose a new one.</p>",
        link,
        "Reset Password",
        "This link will expire in 1 hour. If you didn't request a password reset, "
        "you can safely ignore this email.",
    )
    return send_email_html(to_email, f"Reset your password - {settings.APP_NAME}", html)


def format_trip_dates(start: Optional[date], end: Optional[date]) -> str:
    if start and end:
        return f"{start:%b %d, %Y} - {end:%b %d, %Y}"
    if start:
        return f"From {start:%b %d, %Y}"
    if end:
        return f"Until {end:%b %d, %Y}"
    return "Dates TBD"


def send_trip_invitation_email(
    to_email: str,
    receiver_name: Optional[str],
    sender_name: str,
    trip_name: str,
    trip_description: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    is_new_user: bool = False,
) -> bool:
    invitations_link = frontend_url("/invitations")
    greeting = f"Hi {html_lib.escape(receiver_name)}," if receiver_name else "Hi there,"
    # Trip and sender text is user-entered
    safe_sender = html_lib.escape(sender_name)
    safe_trip = html_lib.escape(trip_name)
    safe_description = html_lib.escape(trip_description) if trip_description else ""

    body = f"""
        <p>{greeting}</p>
        <p><strong>{safe_sender}</strong> has invited you to join a trip.</p>
        <div style="background: white; padding: 20px; border-radius: 8px;">
          <h3 style="margin-top: 0;">{safe_trip}</h3>
          {f"<p>{safe_description}</p>" if safe_description else ""}
          <p><strong>Dates:</strong> {format_trip_dates(start_date, end_date)}</p>
        </div>
    """
    if is_new_user:
        signup_link = frontend_url("/auth/signup")
        body += f"""
        <p>You don't have an account yet. Create one with this email address and the
        invitation will be waiting for you:</p>
        <p><a href="{signup_link}">Create your account</a></p>
        """

    html = _layout(
        "You're Invited!",
        body,
        invitations_link,
        "View Invitation",
        "You can accept or decline the invitation from your invitations page.",
    )
    return send_email_html(to_email, f"{sender_name} invited you to {trip_name}", html)
