# tests/test_employees.py

"""
Tests for employee management within a company.
"""

import pytest

from tests.fakes import seed_company, seed_employee, seed_site


@pytest.fixture
def company(db):
    return seed_company(db)


def test_admin_lists_active_employees(client, db, login, company):
    seed_employee(db, company, "admin-1", role="admin", email="ada@example.com", display_name="Ada")
    seed_employee(db, company, "user-2", role="employee", email="pat@example.com", display_name="Pat")
    seed_employee(db, company, "user-3", role="employee", is_active=False)
    login("admin-1", "ada@example.com")

    response = client.get(f"/companies/{company['id']}/employees")

    assert response.status_code == 200
    employees = response.json()["employees"]
    assert {e["email"] for e in employees} == {"ada@example.com", "pat@example.com"}


def test_manager_cannot_list_employees(client, db, login, company):
    seed_employee(db, company, "manager-1", role="manager")
    login("manager-1", "mia@example.com")

    assert client.get(f"/companies/{company['id']}/employees").status_code == 403


def test_admin_assigns_sites(client, db, login, company):
    site = seed_site(db, company)
    seed_employee(db, company, "admin-1", role="admin")
    pat = seed_employee(db, company, "user-2", role="employee")
    login("admin-1", "ada@example.com")

    response = client.patch(
        f"/companies/{company['id']}/employees/{pat['id']}",
        json={"site_assignments": [site["id"], site["id"]], "role": "manager"},
    )

    assert response.status_code == 200
    stored = db.rows("employees", id=pat["id"])[0]
    assert stored["site_assignments"] == [site["id"]]
    assert stored["role"] == "manager"


def test_unknown_site_assignment(client, db, login, company):
    other = seed_company(db, slug="other")
    foreign_site = seed_site(db, other)
    seed_employee(db, company, "admin-1", role="admin")
    pat = seed_employee(db, company, "user-2", role="employee")
    login("admin-1", "ada@example.com")

    response = client.patch(
        f"/companies/{company['id']}/employees/{pat['id']}",
        json={"site_assignments": [foreign_site["id"]]},
    )

    assert response.status_code == 400


def test_only_owner_grants_admin(client, db, login, company):
    seed_employee(db, company, "admin-1", role="admin")
    seed_employee(db, company, "owner-1", role="owner")
    pat = seed_employee(db, company, "user-2", role="employee")
    url = f"/companies/{company['id']}/employees/{pat['id']}"

    login("admin-1", "ada@example.com")
    assert client.patch(url, json={"role": "admin"}).status_code == 403

    login("owner-1", "olive@example.com")
    assert client.patch(url, json={"role": "admin"}).status_code == 200


def test_owner_role_cannot_be_assigned(client, db, login, company):
    seed_employee(db, company, "owner-1", role="owner")
    pat = seed_employee(db, company, "user-2", role="employee")
    login("owner-1", "olive@example.com")

    response = client.patch(f"/companies/{company['id']}/employees/{pat['id']}", json={"role": "owner"})

    assert response.status_code == 422


def test_owner_cannot_be_removed(client, db, login, company):
    seed_employee(db, company, "admin-1", role="admin")
    owner = seed_employee(db, company, "owner-1", role="owner")
    login("admin-1", "ada@example.com")

    response = client.delete(f"/companies/{company['id']}/employees/{owner['id']}")

    assert response.status_code == 403
    assert db.rows("employees", id=owner["id"])[0]["is_active"] is True


def test_cannot_remove_self(client, db, login, company):
    owner = seed_employee(db, company, "owner-1", role="owner")
    login("owner-1", "olive@example.com")

    response = client.delete(f"/companies/{company['id']}/employees/{owner['id']}")

    assert response.status_code == 400


def test_removed_employee_loses_access(client, db, login, company):
    seed_employee(db, company, "admin-1", role="admin")
    pat = seed_employee(db, company, "user-2", role="employee")

    login("admin-1", "ada@example.com")
    assert client.delete(f"/companies/{company['id']}/employees/{pat['id']}").status_code == 200

    login("user-2", "pat@example.com")
    assert client.get("/employee/profile").status_code == 404
    assert client.get("/employee/route-guard", params={"path": "/dashboard"}).json()["redirect"] == "/onboarding"


def test_employee_in_other_company_is_404(client, db, login, company):
    other = seed_company(db, slug="other")
    outsider = seed_employee(db, other, "user-9", role="employee")
    seed_employee(db, company, "admin-1", role="admin")
    login("admin-1", "ada@example.com")

    response = client.delete(f"/companies/{company['id']}/employees/{outsider['id']}")

    assert response.status_code == 404
