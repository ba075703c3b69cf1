# tests/test_permissions.py

"""
Tests for the role → capability matrix and the tenant scoping helpers.
"""

import pytest
from fastapi import HTTPException

from core.authorization import EmployeeContext
from core.permissions import (
    ROLES,
    ROLE_PERMISSIONS,
    INVITABLE_ROLES,
    REPORTS_OWN,
    REPORTS_VIEW_ALL,
    SITES_MANAGE,
    DATA_EXPORT,
    EMPLOYEES_MANAGE,
    COMPANY_SETTINGS,
    BILLING_VIEW,
    COMPANY_DELETE,
)
from core.permission_helpers import (
    has_capability,
    role_at_least,
    require_capability,
    ensure_same_company,
    can_access_site,
)


def _context(role="employee", company_id="company-1", site_assignments=None):
    return EmployeeContext(
        employee_id="emp-1",
        user_id="user-1",
        company_id=company_id,
        role=role,
        site_assignments=site_assignments or [],
    )


def test_roles_are_strictly_nested():
    """Every role holds all capabilities of the roles below it."""
    for lower, higher in zip(ROLES, ROLES[1:]):
        assert set(ROLE_PERMISSIONS[lower]) < set(ROLE_PERMISSIONS[higher])


@pytest.mark.parametrize("role,capability,expected", [
    ("employee", REPORTS_OWN, True),
    ("employee", REPORTS_VIEW_ALL, False),
    ("employee", SITES_MANAGE, False),
    ("manager", SITES_MANAGE, True),
    ("manager", DATA_EXPORT, True),
    ("manager", EMPLOYEES_MANAGE, False),
    ("admin", EMPLOYEES_MANAGE, True),
    ("admin", COMPANY_SETTINGS, True),
    ("admin", BILLING_VIEW, False),
    ("admin", COMPANY_DELETE, False),
    ("owner", BILLING_VIEW, True),
    ("owner", COMPANY_DELETE, True),
])
def test_capability_matrix(role, capability, expected):
    assert has_capability(role, capability) is expected


def test_unknown_role_has_no_capabilities():
    assert has_capability("superuser", REPORTS_OWN) is False
    assert role_at_least("superuser", "employee") is False


def test_owner_is_never_invitable():
    assert "owner" not in INVITABLE_ROLES
    assert set(INVITABLE_ROLES) == {"employee", "manager", "admin"}


def test_role_at_least():
    assert role_at_least("owner", "admin")
    assert role_at_least("manager", "manager")
    assert not role_at_least("manager", "admin")


def test_require_capability_raises_403():
    with pytest.raises(HTTPException) as exc:
        require_capability(_context("manager"), EMPLOYEES_MANAGE)
    assert exc.value.status_code == 403


def test_other_company_looks_missing():
    with pytest.raises(HTTPException) as exc:
        ensure_same_company(_context("owner"), "company-2")
    assert exc.value.status_code == 404


def test_site_access_follows_assignments():
    employee = _context("employee", site_assignments=["site-a"])
    assert can_access_site(employee, "site-a")
    assert not can_access_site(employee, "site-b")
    assert not can_access_site(_context("employee"), "site-a")
    assert can_access_site(_context("manager"), "site-b")
