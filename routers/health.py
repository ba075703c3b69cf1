# routers/health.py

from fastapi import APIRouter

from core.config import settings
from core.config_validator import validate_optional_config, validate_required_config
from core.notifications import email_configured
from core.supabase_client import ping_supabase

# Unauthenticated, safe for uptime monitors. Never echo secret values.
router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get("/app", summary="API liveness")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "environment": settings.ENV,
    }


@router.get("/db", summary="Tenant table reachability")
async def health_db():
    """One check per tenant table; any failing table marks the result degraded."""
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status["status"],
        "details": status,
    }


@router.get("/integrations", summary="Which optional integrations are configured")
async def health_integrations():
    missing_required = validate_required_config()
    return {
        "status": "ok" if not missing_required else "misconfigured",
        "missing_required": missing_required,
        "integrations": {
            "email": email_configured(),
            "stripe_webhooks": bool(settings.STRIPE_WEBHOOK_SECRET),
            "weather": bool(settings.OPENWEATHER_API_KEY),
        },
        "warnings": validate_optional_config(),
    }
