# core/email_utils.py

from urllib.parse import urlencode

from core.config import settings
from core.notifications import send_email
from core.logging_config import logger, mask_email


def build_invitation_links(email: str, company_name: str, invitation_code: str, inviter_name: str) -> dict:
    """
    Login / sign-up links carrying the invitation so the front end can
    prefill the join form after authentication.
    """
    base = settings.APP_BASE_URL.rstrip("/")
    query = urlencode({
        "invitation": invitation_code,
        "company": company_name,
        "inviter": inviter_name,
        "email": email,
    })
    return {
        "login_url": f"{base}/login?{query}",
        "signup_url": f"{base}/signup?{query}",
    }


def send_invitation_email(
    email: str,
    company_name: str,
    invitation_code: str,
    inviter_name: str,
    role: str,
    expires_at: str,
) -> bool:
    """
    Sends the invitation email using the main SMTP sender.
    Returns True only when the message was handed to the SMTP server.
    """
    links = build_invitation_links(email, company_name, invitation_code, inviter_name)

    subject = f"You're invited to join {company_name} on SlipCheck"
    body = f"""
Hello,

{inviter_name} has invited you to join {company_name} on SlipCheck as {role}.

Your invitation code: {invitation_code}

Already have an account? Sign in:
{links["login_url"]}

New to SlipCheck? Create your account:
{links["signup_url"]}

This invitation expires on {expires_at[:10]}.

SlipCheck
"""

    sent = send_email(subject=subject, body=body, to=email)

    if sent:
        logger.info(f"Invitation email sent to {mask_email(email)}")

    return sent
