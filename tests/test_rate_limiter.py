# tests/test_rate_limiter.py

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from core.config import settings
from core.rate_limiter import check_rate_limit, limit_mutation


def test_allows_up_to_limit():
    assert check_rate_limit("user:1", max_requests=2, window_seconds=60) == (True, 1)
    assert check_rate_limit("user:1", max_requests=2, window_seconds=60) == (True, 0)
    assert check_rate_limit("user:1", max_requests=2, window_seconds=60) == (False, 0)


def test_identifiers_are_independent():
    check_rate_limit("user:1", max_requests=1, window_seconds=60)

    assert check_rate_limit("user:2", max_requests=1, window_seconds=60)[0] is True


def test_limit_mutation_is_per_scope():
    with patch.object(settings, "RATE_LIMIT_MUTATION_MAX", 1):
        limit_mutation("user-1", "companies:create")
        limit_mutation("user-1", "companies:join")

        with pytest.raises(HTTPException) as exc:
            limit_mutation("user-1", "companies:create")

    assert exc.value.status_code == 429
    assert exc.value.headers["Retry-After"] == str(settings.RATE_LIMIT_MUTATION_WINDOW_SECONDS)
