# core/errors.py

from typing import Optional
from fastapi import HTTPException

from core.logging_config import logger

# Postgres SQLSTATE codes surfaced by PostgREST
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def extract_supabase_error(error: Exception) -> str:
    """
    Readable text from a postgrest APIError (.message), a GoTrue error,
    or any other exception.
    """
    message = getattr(error, "message", None)
    if message:
        return str(message)
    if error.args:
        return str(error.args[0])
    return "Unknown Supabase error"


def _error_code(error: Exception) -> str:
    return str(getattr(error, "code", "") or "")


def is_unique_violation(error: Exception, constraint: Optional[str] = None) -> bool:
    """
    True when a write hit a UNIQUE constraint or index. With `constraint`,
    only that constraint name counts.
    """
    detail = extract_supabase_error(error).lower()
    if _error_code(error) != UNIQUE_VIOLATION and "duplicate key" not in detail:
        return False
    return constraint is None or constraint.lower() in detail


def is_foreign_key_violation(error: Exception) -> bool:
    return _error_code(error) == FOREIGN_KEY_VIOLATION or "foreign key" in extract_supabase_error(error).lower()


def handle_supabase_error(error: Exception, operation: str = "Database operation failed", status_code: int = 500) -> HTTPException:
    """
    Map a store error to an HTTPException for the caller to raise.

    The store message (SQL, constraint names) is logged and never sent
    to the client.
    """
    logger.error(f"{operation}: {extract_supabase_error(error)}")

    if is_unique_violation(error):
        return HTTPException(status_code=400, detail=f"{operation}: record already exists")
    if is_foreign_key_violation(error):
        return HTTPException(status_code=400, detail=f"{operation}: invalid reference")
    return HTTPException(status_code=status_code, detail=operation)
