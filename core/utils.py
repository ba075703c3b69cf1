# core/utils.py

import re
import secrets
from datetime import datetime, timedelta, timezone

# No 0/O or 1/I so codes survive being read aloud or retyped
INVITATION_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITATION_CODE_LENGTH = 8

SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,48}[a-z0-9])?$")


def sanitize(data: dict) -> dict:
    """
    Sanitize payload data before it is written:
    - Empty strings → None
    - Strip string whitespace
    - Everything else as-is
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        clean[k] = v

    return clean


# -----------------------------------------------------
# Time helpers (all timestamps are stored as UTC ISO strings)
# -----------------------------------------------------
def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def days_from_now_iso(days: int) -> str:
    return (utc_now() + timedelta(days=days)).isoformat()


def parse_timestamp(value) -> datetime:
    """Parse a stored timestamp; naive values are assumed to be UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# -----------------------------------------------------
# Identifiers
# -----------------------------------------------------
def generate_invitation_code() -> str:
    return "".join(secrets.choice(INVITATION_CODE_ALPHABET) for _ in range(INVITATION_CODE_LENGTH))


def normalize_invitation_code(code: str) -> str:
    return (code or "").strip().upper()


def format_employee_number(sequence: int) -> str:
    return f"EMP{sequence:03d}"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_slug(slug: str) -> bool:
    return bool(slug and SLUG_PATTERN.match(slug))
