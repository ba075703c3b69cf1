# tests/test_sites.py

"""
Tests for company sites: tenant scoping, assignment scoping and the
soft / hard delete rule.
"""

from tests.fakes import seed_company, seed_employee, seed_report, seed_site, seed_user


SITE_PAYLOAD = {"name": "Mall Lot", "address": "200 Market St", "priority": "high", "latitude": 45.5, "longitude": -73.6}


def test_manager_creates_site(client, db, login):
    company = seed_company(db)
    seed_employee(db, company, "manager-1", role="manager")
    login("manager-1", "mia@example.com")

    response = client.post("/sites", json=SITE_PAYLOAD)

    assert response.status_code == 201
    site = response.json()["site"]
    assert site["company_id"] == company["id"]
    assert site["priority"] == "high"


def test_employee_cannot_create_site(client, db, login):
    company = seed_company(db)
    seed_employee(db, company, "user-1", role="employee")
    login("user-1", "pat@example.com")

    assert client.post("/sites", json=SITE_PAYLOAD).status_code == 403


def test_site_limit(client, db, login):
    company = seed_company(db, max_sites=1)
    seed_site(db, company)
    seed_employee(db, company, "manager-1", role="manager")
    login("manager-1", "mia@example.com")

    response = client.post("/sites", json=SITE_PAYLOAD)

    assert response.status_code == 400
    assert response.json()["detail"] == "Company has reached its site limit"


def test_sites_sorted_by_priority(client, db, login):
    company = seed_company(db)
    seed_site(db, company, name="Zeta", priority="low")
    seed_site(db, company, name="Beta", priority="high")
    seed_site(db, company, name="Alpha", priority="medium")
    seed_site(db, company, name="Gone", priority="high", is_active=False)
    seed_employee(db, company, "manager-1", role="manager")
    login("manager-1", "mia@example.com")

    response = client.get("/sites")

    assert [s["name"] for s in response.json()["sites"]] == ["Beta", "Alpha", "Zeta"]


def test_employee_sees_assigned_sites_only(client, db, login):
    company = seed_company(db)
    assigned = seed_site(db, company, name="Assigned")
    other = seed_site(db, company, name="Other")
    seed_employee(db, company, "user-1", role="employee", site_assignments=[assigned["id"]])
    login("user-1", "pat@example.com")

    listed = client.get("/sites").json()["sites"]

    assert [s["id"] for s in listed] == [assigned["id"]]
    assert client.get(f"/sites/{assigned['id']}").status_code == 200
    assert client.get(f"/sites/{other['id']}").status_code == 404


def test_employee_without_assignments_sees_nothing(client, db, login):
    company = seed_company(db)
    seed_site(db, company)
    seed_employee(db, company, "user-1", role="employee")
    login("user-1", "pat@example.com")

    assert client.get("/sites").json()["sites"] == []


def test_other_company_site_is_404(client, db, login):
    mine = seed_company(db, slug="mine")
    theirs = seed_company(db, slug="theirs")
    site = seed_site(db, theirs)
    seed_employee(db, mine, "owner-1", role="owner")
    login("owner-1", "olive@example.com")

    assert client.get(f"/sites/{site['id']}").status_code == 404
    assert client.put(f"/sites/{site['id']}", json={"name": "Mine now"}).status_code == 404
    assert client.delete(f"/sites/{site['id']}").status_code == 404
    assert db.rows("sites", id=site["id"])[0]["name"] == "North Lot"


def test_update_site(client, db, login):
    company = seed_company(db)
    site = seed_site(db, company)
    seed_employee(db, company, "manager-1", role="manager")
    login("manager-1", "mia@example.com")

    response = client.put(f"/sites/{site['id']}", json={"special_instructions": "Salt the ramp first"})

    assert response.status_code == 200
    assert db.rows("sites", id=site["id"])[0]["special_instructions"] == "Salt the ramp first"


def test_site_with_reports_is_soft_deleted(client, db, login):
    company = seed_company(db)
    site = seed_site(db, company)
    manager = seed_employee(db, company, "manager-1", role="manager")
    seed_report(db, manager, site)
    login("manager-1", "mia@example.com")

    response = client.delete(f"/sites/{site['id']}")

    assert response.status_code == 200
    assert response.json()["deleted"] == "soft"
    assert db.rows("sites", id=site["id"])[0]["is_active"] is False


def test_unused_site_is_hard_deleted(client, db, login):
    company = seed_company(db)
    site = seed_site(db, company)
    seed_employee(db, company, "manager-1", role="manager")
    login("manager-1", "mia@example.com")

    response = client.delete(f"/sites/{site['id']}")

    assert response.json()["deleted"] == "hard"
    assert db.rows("sites", id=site["id"]) == []


def test_unbound_user_with_lapsed_trial_gets_404(client, db, login):
    seed_user(db, "user-5", "drifter@example.com", trial_days=-3)
    login("user-5", "drifter@example.com")

    response = client.post("/sites", json=SITE_PAYLOAD)

    assert response.status_code == 404
    assert response.json()["detail"] == "Employee not found"
