# jobs/reconcile_orphans.py

from core.supabase_client import get_supabase_client
from core.logging_config import logger
from services.companies import reconcile_orphaned_companies


def run():
    """
    CLI entry point for the orphaned-company reconciliation.
    Deactivates active companies that have no active employee bindings
    (left behind when a company-creation rollback failed).
    Meant to be scheduled as a cron job.
    """
    client = get_supabase_client()
    if not client:
        raise RuntimeError("Supabase not configured")

    deactivated = reconcile_orphaned_companies()
    logger.info(f"Reconciliation finished: {len(deactivated)} orphaned companies deactivated")
    return deactivated


if __name__ == "__main__":
    run()
