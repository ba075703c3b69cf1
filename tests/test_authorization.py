# tests/test_authorization.py

"""
Tests for the authorization gate: binding resolution, the employee
context dependency and the page route guard.
"""

from unittest.mock import Mock, patch

import pytest

from core.authorization import resolve_employee_binding, route_guard, EmployeeContext
from tests.fakes import seed_company, seed_employee


def _bound_context():
    return EmployeeContext(employee_id="emp-1", user_id="user-1", company_id="company-1", role="employee")


# -----------------------------------------------------
# resolve_employee_binding
# -----------------------------------------------------
def test_resolves_active_binding(db):
    company = seed_company(db)
    employee = seed_employee(db, company, "user-1", role="manager", site_assignments=["site-a"])

    context = resolve_employee_binding("user-1", email="m@example.com", name="Mia")

    assert context.employee_id == employee["id"]
    assert context.company_id == company["id"]
    assert context.role == "manager"
    assert context.site_assignments == ["site-a"]
    assert context.email == "m@example.com"


def test_inactive_binding_is_not_a_binding(db):
    company = seed_company(db)
    seed_employee(db, company, "user-1", is_active=False)

    assert resolve_employee_binding("user-1") is None


def test_store_failure_fails_closed(db):
    with patch("core.authorization.fetch_active_binding", side_effect=RuntimeError("timeout")):
        assert resolve_employee_binding("user-1") is None


def test_unconfigured_store_fails_closed():
    with patch("core.authorization.get_supabase_client", return_value=None):
        assert resolve_employee_binding("user-1") is None


def test_unknown_role_fails_closed(db):
    company = seed_company(db)
    seed_employee(db, company, "user-1", role="superuser")

    assert resolve_employee_binding("user-1") is None


# -----------------------------------------------------
# HTTP: authentication + employee context
# -----------------------------------------------------
def test_missing_token_is_401(client, db):
    response = client.get("/employee/profile")
    assert response.status_code == 401
    assert response.headers.get("WWW-Authenticate") == "Bearer"


def test_invalid_token_is_401(client, db):
    db.auth.get_user.side_effect = Exception("JWT expired")

    response = client.get("/employee/profile", headers={"Authorization": "Bearer stale"})
    assert response.status_code == 401


def test_valid_token_resolves_user(client, db):
    company = seed_company(db)
    seed_employee(db, company, "user-1", role="employee")

    auth_user = Mock(id="user-1", email="Pat@Example.com", user_metadata={"full_name": "Pat Plower"})
    db.auth.get_user.return_value = Mock(user=auth_user)

    response = client.get("/employee/profile", headers={"Authorization": "Bearer good"})

    assert response.status_code == 200
    assert response.json()["company"]["id"] == company["id"]


def test_unbound_user_gets_404(client, db, login):
    login("user-1", "nobody@example.com")

    response = client.get("/employee/profile")
    assert response.status_code == 404
    assert response.json()["detail"] == "Employee not found"


# -----------------------------------------------------
# route_guard
# -----------------------------------------------------
@pytest.mark.parametrize("path", ["/", "/login", "/signup/confirm", "/auth/callback", "/api/auth/session", "/terms"])
def test_public_routes_always_proceed(path):
    assert route_guard(path, None) is None
    assert route_guard(path, _bound_context()) is None


@pytest.mark.parametrize("path", ["/dashboard", "/reports/new", "/sites"])
def test_unbound_users_go_to_onboarding(path):
    assert route_guard(path, None) == "/onboarding"


def test_bound_users_skip_onboarding():
    assert route_guard("/onboarding", _bound_context()) == "/dashboard"
    assert route_guard("/join?code=ABC", _bound_context()) == "/dashboard"
    assert route_guard("/onboarding", None) is None


def test_prefix_match_requires_segment_boundary():
    assert route_guard("/loginhelp", None) == "/onboarding"


def test_route_guard_endpoint(client, db, login):
    login("user-1", "new@example.com")

    response = client.get("/employee/route-guard", params={"path": "/reports"})

    assert response.status_code == 200
    body = response.json()
    assert body["bound"] is False
    assert body["redirect"] == "/onboarding"
