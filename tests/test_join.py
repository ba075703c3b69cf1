# tests/test_join.py

"""
Tests for accepting an invitation (POST /companies/join).
"""

from services.invitations import ALREADY_ACCEPTED, ALREADY_BELONGS, INVITATION_EXPIRED
from tests.fakes import FakeAPIError, seed_company, seed_employee, seed_invitation


def _join(client, code="ABCD2345"):
    return client.post("/companies/join", json={"invitationCode": code})


def test_join_binds_user_with_invited_role(client, db, login):
    company = seed_company(db, name="Acme Snow")
    seed_employee(db, company, "owner-1", role="owner", employee_number="OWNER001")
    invitation = seed_invitation(db, company, "pat@example.com", role="manager")
    login("user-2", "pat@example.com", "Pat Plower")

    response = _join(client, code=" abcd2345 ")

    assert response.status_code == 200
    body = response.json()
    assert body["companyName"] == "Acme Snow"
    assert body["company"]["id"] == company["id"]
    assert body["employee"]["role"] == "manager"
    assert body["employee"]["employee_number"] == "EMP002"

    stored = db.rows("company_invitations", id=invitation["id"])[0]
    assert stored["accepted_at"] is not None
    assert db.rows("users", id="user-2")


def test_invitation_is_single_use(client, db, login):
    company = seed_company(db)
    seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")
    assert _join(client).status_code == 200

    # Same email, different identity
    login("user-3", "pat@example.com")
    response = _join(client)

    assert response.status_code == 400
    assert response.json()["detail"] == ALREADY_ACCEPTED
    assert len(db.rows("employees")) == 1


def test_bound_user_cannot_join_again(client, db, login):
    mine = seed_company(db, slug="mine")
    other = seed_company(db, slug="other")
    seed_employee(db, mine, "user-2", role="employee")
    invitation = seed_invitation(db, other, "pat@example.com")
    login("user-2", "pat@example.com")

    response = _join(client)

    assert response.status_code == 400
    assert response.json()["detail"] == ALREADY_BELONGS
    # Not consumed
    assert db.rows("company_invitations", id=invitation["id"])[0]["accepted_at"] is None


def test_expired_invitation(client, db, login):
    company = seed_company(db)
    seed_invitation(db, company, "pat@example.com", expires_in_days=-1)
    login("user-2", "pat@example.com")

    response = _join(client)

    assert response.status_code == 400
    assert response.json()["detail"] == INVITATION_EXPIRED


def test_code_for_another_email_is_not_found(client, db, login):
    company = seed_company(db)
    seed_invitation(db, company, "pat@example.com")
    login("user-2", "sam@example.com")

    assert _join(client).status_code == 404


def test_unknown_code(client, db, login):
    login("user-2", "pat@example.com")

    assert _join(client, code="ZZZZ9999").status_code == 404


def test_inactive_company(client, db, login):
    company = seed_company(db, is_active=False)
    seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")

    response = _join(client)

    assert response.status_code == 400
    assert response.json()["detail"] == "This company is no longer active"


def test_seat_limit(client, db, login):
    company = seed_company(db, max_employees=1)
    seed_employee(db, company, "owner-1", role="owner")
    invitation = seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")

    response = _join(client)

    assert response.status_code == 400
    assert response.json()["detail"] == "Company has reached its employee limit"
    assert db.rows("company_invitations", id=invitation["id"])[0]["accepted_at"] is None


def test_failed_binding_releases_claim(client, db, login):
    company = seed_company(db)
    invitation = seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")
    db.fail_on("employees", "insert")

    assert _join(client).status_code == 500
    assert db.rows("company_invitations", id=invitation["id"])[0]["accepted_at"] is None

    # The code still works once the store recovers
    assert _join(client).status_code == 200


def test_concurrent_binding_maps_to_already_belongs(client, db, login):
    company = seed_company(db)
    invitation = seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")
    db.fail_on("employees", "insert", FakeAPIError(
        'duplicate key value violates unique constraint "employees_one_active_binding_per_user"',
        code="23505",
    ))

    response = _join(client)

    assert response.status_code == 400
    assert response.json()["detail"] == ALREADY_BELONGS
    assert db.rows("company_invitations", id=invitation["id"])[0]["accepted_at"] is None


def test_employee_number_collision_is_retried(client, db, login):
    company = seed_company(db)
    seed_employee(db, company, "owner-1", role="owner", employee_number="EMP002")
    seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")

    response = _join(client)

    assert response.status_code == 200
    assert response.json()["employee"]["employee_number"] == "EMP003"


def test_rejoin_after_removal(client, db, login):
    company = seed_company(db)
    seed_employee(db, company, "user-2", role="employee", is_active=False)
    seed_invitation(db, company, "pat@example.com")
    login("user-2", "pat@example.com")

    assert _join(client).status_code == 200
    assert len(db.rows("employees", user_id="user-2", is_active=True)) == 1
