# File: tests/test_auth.py

from datetime import timedelta

from sqlalchemy import func, select

from app.core.security import create_access_token, utcnow, verify_password
from app.models.user import User


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _user(db_session, email="a@x.com"):
    db_session.expire_all()
    return db_session.scalar(select(User).where(User.email == email))


# -----------------------------
# register
# -----------------------------

def test_register_creates_unverified_user_and_emails_otp(client, mailer, register, db_session):
    resp = register()
    assert resp.json() == {
        "success": True,
        "message": "User registered successfully. OTP sent to email.",
    }

    assert len(mailer.outbox) == 1
    assert mailer.outbox[0]["subject"] == "Your OTP for Registration"
    otp = mailer.last_otp("a@x.com")
    assert 100000 <= int(otp) <= 999999

    user = _user(db_session)
    assert user.verified is False
    assert user.otp == otp
    assert user.otp_expires_at > utcnow()
    assert user.otp_expires_at <= utcnow() + timedelta(minutes=5)
    assert user.hashed_password != "secret123"
    assert verify_password("secret123", user.hashed_password)


def test_register_twice_conflicts_without_duplicate(client, register, db_session):
    register()
    resp = client.post(
        "/api/auth/register",
        json={
            "firstName": "Other",
            "lastName": "Person",
            "email": "A@X.com",
            "password": "secret123",
            "gender": "Male",
            "mobileNumber": "5559999",
        },
    )
    assert resp.status_code == 409
    assert resp.json()["success"] is False

    count = db_session.scalar(select(func.count()).select_from(User))
    assert count == 1


def test_register_missing_fields_is_400(client, mailer):
    resp = client.post("/api/auth/register", json={"email": "a@x.com", "password": "secret123"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "All fields are required!"
    assert mailer.outbox == []


def test_register_email_failure_stores_nothing(client, mailer, db_session):
    mailer.fail = True
    resp = client.post(
        "/api/auth/register",
        json={
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "a@x.com",
            "password": "secret123",
            "gender": "Female",
            "mobileNumber": "5550001",
        },
    )
    assert resp.status_code == 500
    assert "OTP email" in resp.json()["message"]
    assert _user(db_session) is None


def test_register_password_over_72_bytes_is_400_and_sends_nothing(client, mailer, db_session):
    # 40 characters but 80 bytes in UTF-8
    resp = client.post(
        "/api/auth/register",
        json={
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "a@x.com",
            "password": "é" * 40,
            "gender": "Female",
            "mobileNumber": "5550001",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert mailer.outbox == []
    assert _user(db_session) is None


def test_validation_errors_do_not_echo_password(client, mailer):
    resp = client.post(
        "/api/auth/register",
        json={
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "a@x.com",
            "password": "pw1",
            "gender": "Female",
            "mobileNumber": "5550001",
        },
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid value for: password"
    assert "pw1" not in resp.text
    assert all("input" not in e and "ctx" not in e for e in body["errors"])


# -----------------------------
# verify-otp
# -----------------------------

def test_verify_otp_success_clears_fields(client, mailer, register, db_session):
    register()
    resp = client.post(
        "/api/auth/verify-otp",
        json={"email": "a@x.com", "otp": mailer.last_otp("a@x.com")},
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    user = _user(db_session)
    assert user.verified is True
    assert user.otp is None
    assert user.otp_expires_at is None


def test_verify_otp_accepts_numeric_code(client, mailer, register):
    register()
    otp = int(mailer.last_otp("a@x.com"))
    resp = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": otp})
    assert resp.status_code == 200


def test_verify_otp_wrong_code(client, mailer, register, db_session):
    register()
    otp = mailer.last_otp("a@x.com")
    wrong = "100000" if otp != "100000" else "100001"
    resp = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": wrong})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid or expired OTP"
    assert _user(db_session).verified is False


def test_verify_otp_expired_code_fails_even_if_correct(client, mailer, register, db_session):
    register()
    otp = mailer.last_otp("a@x.com")

    user = _user(db_session)
    user.otp_expires_at = utcnow() - timedelta(seconds=1)
    db_session.commit()

    resp = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": otp})
    assert resp.status_code == 400
    assert _user(db_session).verified is False


def test_verify_otp_unknown_user(client):
    resp = client.post("/api/auth/verify-otp", json={"email": "nobody@x.com", "otp": "123456"})
    assert resp.status_code == 404


def test_verify_otp_is_single_use(client, mailer, register):
    register()
    otp = mailer.last_otp("a@x.com")
    first = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": otp})
    second = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": otp})
    assert first.status_code == 200
    assert second.status_code == 400


def test_otp_lockout_then_resend(client, mailer, register, db_session):
    register()
    otp = mailer.last_otp("a@x.com")
    wrong = "100000" if otp != "100000" else "100001"

    statuses = [
        client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": wrong}).status_code
        for _ in range(5)
    ]
    assert statuses == [400, 400, 400, 400, 429]

    # the right code no longer works once the pending OTP is discarded
    resp = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": otp})
    assert resp.status_code == 429

    resp = client.post("/api/auth/resend-otp", json={"email": "a@x.com"})
    assert resp.status_code == 200
    fresh = mailer.last_otp("a@x.com")
    assert _user(db_session).otp_attempts == 0

    resp = client.post("/api/auth/verify-otp", json={"email": "a@x.com", "otp": fresh})
    assert resp.status_code == 200


def test_resend_otp_for_verified_user_is_rejected(client, verified_user):
    verified_user()
    resp = client.post("/api/auth/resend-otp", json={"email": "a@x.com"})
    assert resp.status_code == 400


# -----------------------------
# login
# -----------------------------

def test_login_unverified_user_is_unauthorized(client, register):
    register()
    resp = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret123"})
    assert resp.status_code == 401
    assert "not verified" in resp.json()["message"]


def test_register_verify_login_scenario(client, verified_user):
    verified_user()

    resp = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"] == {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "a@x.com",
        "role": "user",
    }

    wrong_pw = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope-nope"})
    no_user = client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "nope-nope"})
    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json()["message"] == no_user.json()["message"] == "Invalid email or password"


def test_login_email_is_case_insensitive(client, verified_user):
    verified_user()
    resp = client.post("/api/auth/login", json={"email": " A@X.COM ", "password": "secret123"})
    assert resp.status_code == 200


# -----------------------------
# access control
# -----------------------------

def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Authorization token is required"}


def test_me_rejects_garbage_token(client):
    resp = client.get("/api/auth/me", headers=bearer("not-a-jwt"))
    assert resp.status_code == 401


def test_me_rejects_expired_token(client, user_token, db_session):
    user = _user(db_session)
    expired = create_access_token(
        {"userId": user.id, "email": user.email, "ver": user.token_version},
        expires_delta=timedelta(seconds=-5),
    )
    resp = client.get("/api/auth/me", headers=bearer(expired))
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid or expired token"}


def test_me_returns_profile(client, user_token):
    resp = client.get("/api/auth/me", headers=bearer(user_token))
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["email"] == "a@x.com"
    assert user["verified"] is True
    assert "hashed_password" not in user
    assert "otp" not in user


def test_token_for_deleted_user_is_rejected(client, user_token, db_session):
    db_session.delete(_user(db_session))
    db_session.commit()
    resp = client.get("/api/auth/me", headers=bearer(user_token))
    assert resp.status_code == 401


# -----------------------------
# forgot / reset password
# -----------------------------

def test_forgot_then_reset_succeeds_once(client, mailer, verified_user, login, db_session):
    verified_user()
    resp = client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    assert resp.status_code == 200

    raw = mailer.last_reset_token("a@x.com")
    assert "http://frontend.test/reset-password/?reset-token=" in mailer.outbox[-1]["body"]
    assert len(raw) == 64

    user = _user(db_session)
    assert user.password_reset_token_hash is not None
    assert user.password_reset_token_hash != raw

    resp = client.post(
        "/api/auth/reset-password", json={"resetToken": raw, "newPassword": "brand-new-pw"}
    )
    assert resp.status_code == 200

    user = _user(db_session)
    assert user.password_reset_token_hash is None
    assert user.password_reset_expires_at is None

    replay = client.post(
        "/api/auth/reset-password", json={"resetToken": raw, "newPassword": "another-pw"}
    )
    assert replay.status_code == 400

    login("a@x.com", "brand-new-pw")
    old = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret123"})
    assert old.status_code == 401


def test_reset_with_expired_token_fails(client, mailer, verified_user, db_session):
    verified_user()
    client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    raw = mailer.last_reset_token("a@x.com")

    user = _user(db_session)
    user.password_reset_expires_at = utcnow() - timedelta(seconds=1)
    db_session.commit()

    resp = client.post(
        "/api/auth/reset-password", json={"resetToken": raw, "newPassword": "brand-new-pw"}
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid or expired reset token."


def test_forgot_password_unknown_email(client):
    resp = client.post("/api/auth/forgot-password", json={"email": "ghost@x.com"})
    assert resp.status_code == 404


def test_forgot_password_email_failure_withdraws_token(client, mailer, verified_user, db_session):
    verified_user()
    mailer.fail = True
    resp = client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    assert resp.status_code == 500
    user = _user(db_session)
    assert user.password_reset_token_hash is None
    assert user.password_reset_expires_at is None


def test_password_reset_revokes_existing_sessions(client, mailer, user_token):
    assert client.get("/api/auth/me", headers=bearer(user_token)).status_code == 200

    client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    raw = mailer.last_reset_token("a@x.com")
    client.post("/api/auth/reset-password", json={"resetToken": raw, "newPassword": "brand-new-pw"})

    resp = client.get("/api/auth/me", headers=bearer(user_token))
    assert resp.status_code == 401


def test_reset_password_over_72_bytes_is_400(client, mailer, verified_user, login):
    verified_user()
    client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    raw = mailer.last_reset_token("a@x.com")

    resp = client.post(
        "/api/auth/reset-password", json={"resetToken": raw, "newPassword": "é" * 40}
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    # the token was not spent and the old password still works
    login("a@x.com", "secret123")
    resp = client.post(
        "/api/auth/reset-password", json={"resetToken": raw, "newPassword": "brand-new-pw"}
    )
    assert resp.status_code == 200
