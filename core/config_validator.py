# core/config_validator.py

from typing import List

from core.config import settings
from core.logging_config import logger
from core.notifications import email_configured

# Without these no request can be authenticated or served
REQUIRED_SETTINGS = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")

# Setting name -> what degrades when it is missing
OPTIONAL_SETTINGS = {
    "STRIPE_WEBHOOK_SECRET": "webhook signatures will not be verified",
    "STRIPE_SECRET_KEY": "Stripe API calls are unavailable",
    "OPENWEATHER_API_KEY": "reports will not be weather-filled",
}


def validate_required_config() -> List[str]:
    return [name for name in REQUIRED_SETTINGS if not getattr(settings, name)]


def validate_optional_config() -> List[str]:
    warnings = []
    if not email_configured():
        warnings.append("SMTP_* (invitation emails will not be sent)")
    for name, consequence in OPTIONAL_SETTINGS.items():
        if not getattr(settings, name):
            warnings.append(f"{name} ({consequence})")
    return warnings


def validate_config_on_startup():
    """
    Refuse to start in production without the required settings or the
    Stripe webhook secret. Elsewhere, log what is missing and carry on.
    """
    production = settings.ENV == "production"

    missing = validate_required_config()
    if production and not settings.STRIPE_WEBHOOK_SECRET:
        missing.append("STRIPE_WEBHOOK_SECRET")

    if missing:
        message = f"Missing required environment variables: {', '.join(missing)}"
        if production:
            logger.error(message)
            raise RuntimeError(message)
        logger.warning(message)

    for warning in validate_optional_config():
        logger.warning(f"Optional configuration missing: {warning}")
