# core/notifications.py
import smtplib
from email.message import EmailMessage
from typing import Optional

from core.config import settings
from core.logging_config import logger, mask_email

SMTP_TIMEOUT_SECONDS = 15
IMPLICIT_TLS_PORT = 465


def email_configured() -> bool:
    return all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS])


def _open_smtp() -> smtplib.SMTP:
    # 465 speaks TLS from the first byte, anything else upgrades with STARTTLS
    if settings.SMTP_PORT == IMPLICIT_TLS_PORT:
        return smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)
    server.starttls()
    return server


def send_email(
    subject: str,
    body: str,
    to: str,
    html_body: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> bool:
    """
    Send one message over SMTP.

    Returns False without sending when there is no recipient or SMTP is
    not configured. Transport errors are logged and re-raised so the
    caller decides whether delivery failure matters.
    """
    if not to:
        logger.warning("Email skipped: no recipient")
        return False

    if not email_configured():
        logger.warning(f"Email to {mask_email(to)} skipped: SMTP not configured")
        return False

    msg = EmailMessage()
    msg["From"] = settings.EMAIL_FROM or settings.SMTP_USER
    msg["To"] = to
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to
    msg.set_content(body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    try:
        with _open_smtp() as server:
            server.login(settings.SMTP_USER, settings.SMTP_PASS)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email to {mask_email(to)} failed: {e}")
        raise

    logger.info(f"Email sent to {mask_email(to)}")
    return True
