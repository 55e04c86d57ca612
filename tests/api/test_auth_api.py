from bitsa.models.enums import UserRole
from bitsa.models.user import User


def register_payload(**overrides):
    data = {
        "student_id": "BIT2026001",
        "name": "Grace Hopper",
        "email": "Grace@Uni.ac.ke",
        "password": "compilers1",
        "course": "BSc IT",
        "year_of_study": 2,
    }
    data.update(overrides)
    return data


def test_register_creates_student_and_returns_token(client):
    response = client.post("/api/auth/register", json=register_payload())

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["access_token"]
    assert body["user"]["email"] == "grace@uni.ac.ke"
    assert "password_hash" not in body["user"]

    user = User.query.filter_by(student_id="BIT2026001").one()
    assert user.role == UserRole.STUDENT


def test_register_duplicate(client):
    client.post("/api/auth/register", json=register_payload())
    response = client.post(
        "/api/auth/register", json=register_payload(email="other@uni.ac.ke")
    )
    assert response.status_code == 409
    assert response.get_json()["success"] is False


def test_register_validation_errors(client):
    response = client.post("/api/auth/register", json={"name": "x", "password": "short"})
    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert "student_id" in errors
    assert "password" in errors


def test_login_with_student_id_or_email(client, make_user):
    make_user(student_id="BIT777", email="ada@uni.ac.ke", password="password123")

    by_id = client.post("/api/auth/login", json={"identifier": "BIT777", "password": "password123"})
    by_email = client.post(
        "/api/auth/login", json={"identifier": "ADA@uni.ac.ke", "password": "password123"}
    )

    assert by_id.status_code == 200
    assert by_email.status_code == 200
    assert by_id.get_json()["access_token"]


def test_login_bad_credentials(client, make_user):
    make_user(student_id="BIT777", password="password123")
    response = client.post("/api/auth/login", json={"identifier": "BIT777", "password": "nope"})
    assert response.status_code == 401


def test_login_inactive_user(client, make_user):
    make_user(student_id="BIT778", password="password123", is_active=False)
    response = client.post(
        "/api/auth/login", json={"identifier": "BIT778", "password": "password123"}
    )
    assert response.status_code == 403


def test_me(client, student, student_headers):
    response = client.get("/api/auth/me", headers=student_headers)
    assert response.status_code == 200
    assert response.get_json()["user"]["student_id"] == student.student_id


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.get_json() == {"success": False, "message": "No token provided. Please login."}


def test_me_with_garbage_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401
