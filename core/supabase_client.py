# core/supabase_client.py

from functools import lru_cache
from typing import Optional

from supabase import create_client, Client

from core.config import settings
from core.logging_config import logger

# Tables the API reads on almost every request
TENANT_TABLES = ("companies", "employees", "company_invitations", "sites")


@lru_cache(maxsize=2)
def _client_for(url: str, service_key: str) -> Client:
    return create_client(url, service_key)


def get_supabase_client() -> Optional[Client]:
    """
    Service-role client shared by every request.

    Row level security is bypassed, so each tenant query must filter on
    company_id itself. Bearer tokens are validated through the same
    client's GoTrue endpoint. Returns None when credentials are missing.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.error(
            "Supabase is not configured "
            f"(url={'set' if settings.SUPABASE_URL else 'missing'}, "
            f"service key={'set' if settings.SUPABASE_SERVICE_ROLE_KEY else 'missing'})"
        )
        return None

    try:
        return _client_for(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        logger.error(f"Supabase client could not be created: {e}", exc_info=True)
        return None


def ping_supabase() -> dict:
    """Check each tenant table with a one-row select."""
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured", "tables": {}}

    tables = {}
    for name in TENANT_TABLES:
        try:
            res = client.table(name).select("id").limit(1).execute()
            tables[name] = {"status": "ok", "rows_found": len(res.data or [])}
        except Exception as err:
            logger.error(f"Supabase check failed for {name}: {err}")
            tables[name] = {"status": "error"}

    healthy = all(t["status"] == "ok" for t in tables.values())
    return {
        "service": "Supabase",
        "status": "ok" if healthy else "degraded",
        "tables": tables,
    }
