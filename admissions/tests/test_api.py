"""
HTTP surface: auth, application flow through the API and error status mapping.
"""

import pytest

from conftest import make_user, make_catalog, add_requirement, auth_header
from models.enums import UserRole


@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    _, dept, prog = make_catalog(db)
    add_requirement(db, prog, "GRADE", "Mathematics", "B")
    student = make_user(db, name="Ama Mensah", email="ama@uq-mail.com")
    admin = make_user(db, UserRole.DEPARTMENT_ADMINISTRATOR, department=dept)
    super_admin = make_user(db, UserRole.SUPER_ADMIN)
    db.commit()
    data = {
        "program_id": str(prog.id),
        "department_id": str(dept.id),
        "student": auth_header(student),
        "admin": auth_header(admin),
        "super": auth_header(super_admin),
    }
    db.close()
    return data


def test_register_login_and_me(client):
    r = client.post("/auth/register", json={"email": "Kofi@UQ-mail.com", "password": "secret123", "name": "Kofi"})
    assert r.status_code == 201
    token = r.json()["access_token"]

    me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["role"] == "STUDENT"
    assert me.json()["student_id"] is not None

    dup = client.post("/auth/register", json={"email": "kofi@uq-mail.com", "password": "secret123", "name": "Kofi"})
    assert dup.status_code == 400

    assert client.post("/auth/login", json={"email": "kofi@uq-mail.com", "password": "secret123"}).status_code == 200
    bad = client.post("/auth/login", json={"email": "kofi@uq-mail.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid credentials"


def test_missing_or_bad_token(client):
    assert client.get("/users/me").status_code == 401
    r = client.get("/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json()["detail"].startswith("Invalid token")


def test_change_password(client, seeded):
    r = client.post("/users/me/password", headers=seeded["student"],
                    json={"current_password": "wrong", "new_password": "another1"})
    assert r.status_code == 400
    r = client.post("/users/me/password", headers=seeded["student"],
                    json={"current_password": "secret123", "new_password": "another1"})
    assert r.status_code == 204
    assert client.post("/auth/login", json={"email": "ama@uq-mail.com", "password": "another1"}).status_code == 200


def test_application_flow(client, seeded):
    student, admin = seeded["student"], seeded["admin"]

    r = client.post("/applications", headers=student, json={"program_id": seeded["program_id"]})
    assert r.status_code == 201
    app = r.json()
    assert app["status"] == "DRAFT"
    assert app["university_name"] == "Accra Tech"

    dup = client.post("/applications", headers=student, json={"program_id": seeded["program_id"]})
    assert dup.status_code == 409

    r = client.post(f"/applications/{app['id']}/submit", headers=student)
    assert r.status_code == 200
    assert r.json()["status"] == "PENDING"
    assert client.post(f"/applications/{app['id']}/submit", headers=student).status_code == 409

    forbidden = client.patch(f"/applications/{app['id']}/status", headers=student, json={"status": "APPROVED"})
    assert forbidden.status_code == 403

    r = client.patch(f"/applications/{app['id']}/status", headers=admin,
                     json={"status": "APPROVED", "note": "Strong maths"})
    assert r.status_code == 200
    assert r.json()["status"] == "APPROVED"
    assert [n["content"] for n in r.json()["notes"]] == ["Strong maths"]

    mine = client.get(f"/applications/{app['id']}", headers=student).json()
    assert mine["notes"] == []

    queue = client.get("/applications/review", headers=admin, params={"search": "ama"})
    assert [a["id"] for a in queue.json()] == [app["id"]]


def test_unknown_application_is_404(client, seeded):
    r = client.get("/applications/00000000-0000-0000-0000-000000000000", headers=seeded["student"])
    assert r.status_code == 404
    assert r.json()["detail"] == "Application not found"


def test_catalog_is_public_but_writes_are_not(client, seeded):
    assert [u["slug"] for u in client.get("/universities").json()] == ["accra-tech"]
    assert client.get("/universities/slug/accra-tech").status_code == 200
    assert client.get(f"/programs/{seeded['program_id']}").json()["requirements"][0]["type"] == "GRADE"

    r = client.post("/universities", headers=seeded["admin"], json={"name": "X", "slug": "x"})
    assert r.status_code == 403
    r = client.post("/universities", headers=seeded["super"], json={"name": "Ashesi", "slug": "Not Valid"})
    assert r.status_code == 400
    r = client.post("/universities", headers=seeded["super"], json={"name": "Ashesi", "slug": "ashesi"})
    assert r.status_code == 201


def test_qualification_and_matches(client, seeded):
    student, admin = seeded["student"], seeded["admin"]
    r = client.post("/qualifications", headers=student,
                    json={"type": "HIGH_SCHOOL", "subject": "Mathematics", "grade": "A"})
    assert r.status_code == 201
    qual = r.json()
    assert qual["verified"] is False

    assert client.get("/matches", headers=student).json() == []
    detail = client.get(f"/matches/{seeded['program_id']}", headers=student).json()
    assert detail["qualifies"] is True

    assert client.post(f"/qualifications/{qual['id']}/verify", headers=student).status_code == 403
    assert client.post(f"/qualifications/{qual['id']}/verify", headers=admin).json()["verified"] is True

    matches = client.get("/matches", headers=student).json()
    assert [m["program_id"] for m in matches] == [seeded["program_id"]]
    assert client.get("/matches/count", headers=student).json() == {"count": 1}

    check = client.get(f"/programs/{seeded['program_id']}/eligibility", headers=student).json()
    assert check["can_apply"] is True


def test_student_dashboard_falls_back_without_provider_key(client, seeded):
    r = client.get("/dashboard/student", headers=seeded["student"])
    assert r.status_code == 200
    body = r.json()
    assert body["total_matches"] == 0
    assert [c["name"] for c in body["recommended_courses"]] == ["Advanced Mathematics", "Python Programming"]

    assert client.get("/dashboard/student", headers=seeded["admin"]).status_code == 403
    assert client.get("/dashboard/overview", headers=seeded["admin"]).status_code == 403
    assert client.get("/dashboard/overview", headers=seeded["super"]).status_code == 200


def test_recommendation_endpoints(client, seeded):
    r = client.get("/recommendations/courses", headers=seeded["student"])
    assert r.status_code == 200
    assert len(r.json()) == 2
    health = client.get("/recommendations/health")
    assert health.status_code == 200
    assert "quota_remaining" in health.json()
