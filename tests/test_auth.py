"""
Tests for registration, login, email verification and password reset.
"""
import threading
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wagehire.core import config
from wagehire.core.clock import utcnow
from wagehire.db.init_db import create_tables
from wagehire.db.models.user import User
from wagehire.schemas.auth import RegisterRequest
from wagehire.services import auth_service

STRONG_PASSWORD = "Str0ng!Pass"


def _token_from(url: str) -> str:
    return parse_qs(urlparse(url).query)["token"][0]


def test_first_user_is_verified_admin(api, mailer):
    response = api.register("first@example.com", name="First User")

    assert response.status_code == 201
    data = response.json()
    assert data["is_admin"] is True
    assert data["user"]["role"] == "admin"
    assert data["user"]["email_verified"] is True
    assert data["verification_url"] is None
    assert mailer.sent == []


def test_later_users_are_candidates_regardless_of_submitted_role(api, admin):
    response = api.register("second@example.com", name="Second User", role="admin")

    assert response.status_code == 201
    data = response.json()
    assert data["is_admin"] is False
    assert data["user"]["role"] == "candidate"
    assert data["user"]["email_verified"] is False


def test_registration_without_mail_returns_verification_url(api, admin):
    data = api.register("second@example.com", name="Second User").json()

    assert data["email_verification_sent"] is False
    assert data["verification_url"].startswith(f"{config.FRONTEND_URL}/verify-email?token=")


def test_registration_with_mail_omits_url(api, admin, mailer):
    mailer.deliver = True
    data = api.register("second@example.com", name="Second User").json()

    assert data["email_verification_sent"] is True
    assert data["verification_url"] is None
    assert mailer.sent[0]["to"] == "second@example.com"


def test_duplicate_email_conflicts(api, admin):
    response = api.register("ADMIN@example.com", name="Again")

    assert response.status_code == 409
    assert response.json()["code"] == "conflict"


def test_weak_password_rejected(api):
    response = api.register("weak@example.com", password="alllowercase")

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_failed"
    assert "Password must contain at least one uppercase letter" in body["password_errors"]


def test_schema_validation_uses_422(api):
    response = api.register("not-an-email", name="X")

    assert response.status_code == 422
    assert response.json()["code"] == "validation_failed"


def test_login_success_and_failure(api, admin):
    ok = api.login("admin@example.com")
    assert ok.status_code == 200
    assert ok.json()["token_type"] == "bearer"
    assert ok.json()["user"]["email"] == "admin@example.com"

    bad = api.login("admin@example.com", "Wr0ng!Pass")
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid credentials"

    unknown = api.login("nobody@example.com")
    assert unknown.status_code == 401
    assert unknown.json()["detail"] == "Invalid credentials"


def test_login_requires_verification_when_enabled(api, admin, monkeypatch):
    api.register("second@example.com", name="Second User")
    monkeypatch.setattr(config, "REQUIRE_EMAIL_VERIFICATION", True)

    response = api.login("second@example.com")

    assert response.status_code == 401
    assert response.json()["email_not_verified"] is True
    assert api.login("admin@example.com").status_code == 200


def test_verify_email_flow(api, client, admin):
    url = api.register("second@example.com", name="Second User").json()["verification_url"]
    token = _token_from(url)

    response = client.get("/api/auth/verify-email", params={"token": token})
    assert response.status_code == 200
    assert response.json()["user"]["email_verified"] is True

    again = client.get("/api/auth/verify-email", params={"token": token})
    assert again.status_code == 400


def test_verify_email_missing_or_expired_token(api, client, db, admin):
    assert client.get("/api/auth/verify-email").status_code == 400

    url = api.register("second@example.com", name="Second User").json()["verification_url"]
    user = db.query(User).filter(User.email == "second@example.com").first()
    user.email_verification_expires = utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.get("/api/auth/verify-email", params={"token": _token_from(url)})
    assert response.status_code == 400
    assert response.json()["detail"] == "Verification token has expired"


def test_resend_verification(api, client, admin):
    first_url = api.register("second@example.com", name="Second User").json()["verification_url"]

    response = client.post("/api/auth/resend-verification", json={"email": "second@example.com"})
    assert response.status_code == 200
    data = response.json()
    assert data["email_sent"] is False
    assert data["verification_url"] != first_url

    verified = client.post("/api/auth/resend-verification", json={"email": "admin@example.com"})
    assert verified.status_code == 400

    unknown = client.post("/api/auth/resend-verification", json={"email": "nobody@example.com"})
    assert unknown.status_code == 404


def test_manual_verification_only_in_development(api, client, admin, monkeypatch):
    api.register("second@example.com", name="Second User")

    assert client.get("/api/auth/manual-verification/second@example.com").status_code == 404

    monkeypatch.setattr(config, "ENVIRONMENT", "development")
    response = client.get("/api/auth/manual-verification/second@example.com")
    assert response.status_code == 200
    assert "/verify-email?token=" in response.json()["verification_url"]


def test_forgot_password_unknown_email_is_not_an_error(client, admin):
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.json()["reset_url"] is None


def test_password_reset_is_single_use(api, client, admin):
    response = client.post("/api/auth/forgot-password", json={"email": "admin@example.com"})
    assert response.status_code == 200
    token = _token_from(response.json()["reset_url"])

    new_password = "N3w!Passw0rd"
    reset = client.post("/api/auth/reset-password", json={"token": token, "password": new_password})
    assert reset.status_code == 200

    assert api.login("admin@example.com", new_password).status_code == 200
    assert api.login("admin@example.com", STRONG_PASSWORD).status_code == 401

    reused = client.post("/api/auth/reset-password", json={"token": token, "password": "An0ther!Pass"})
    assert reused.status_code == 400
    assert reused.json()["detail"] == "Invalid reset token"


def test_password_reset_expired(client, db, admin):
    token = _token_from(
        client.post("/api/auth/forgot-password", json={"email": "admin@example.com"}).json()["reset_url"]
    )
    user = db.query(User).filter(User.email == "admin@example.com").first()
    user.password_reset_expires = utcnow() - timedelta(seconds=1)
    db.commit()

    response = client.post("/api/auth/reset-password", json={"token": token, "password": "N3w!Passw0rd"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Reset token has expired"


def test_profile_requires_valid_token(client, admin):
    assert client.get("/api/auth/profile").status_code == 401

    bad = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid or expired token"

    ok = client.get("/api/auth/profile", headers=admin["headers"])
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "admin@example.com"


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_concurrent_first_registrations_yield_one_admin(tmp_path, mailer):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    create_tables(engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def register(index):
        payload = RegisterRequest(email=f"user{index}@example.com", name=f"User {index}", password=STRONG_PASSWORD)
        session = Session()
        try:
            barrier.wait()
            auth_service.register_user(session, payload, mailer)
        except Exception as exc:
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=register, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    session = Session()
    try:
        roles = [user.role for user in session.query(User).order_by(User.id).all()]
    finally:
        session.close()
        engine.dispose()

    assert errors == []
    assert len(roles) == workers
    assert roles[0] == "admin"
    assert roles.count("admin") == 1
