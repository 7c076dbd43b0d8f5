import os
import re
from pathlib import Path

import pytest

# Configure an in-memory database and fast hashing before importing the app.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEFAULT_ADMIN_EMAIL"] = "root@example.com"
os.environ["DEFAULT_ADMIN_PASSWORD"] = "RootPass123"
os.environ["RESET_PASSWORD_URL"] = "http://frontend.test/reset-password/"

from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_email_sender, get_image_host  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.base import Base  # noqa: E402

OTP_RE = re.compile(r"Your OTP is (\d{6})")
RESET_RE = re.compile(r"reset-token=([0-9a-f]+)")


class FakeEmailSender:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.outbox = []
        self.fail = False

    def send(self, to_email, subject, body):
        if self.fail:
            return False
        self.outbox.append({"to": to_email, "subject": subject, "body": body})
        return True

    def _last_match(self, to_email, pattern):
        for mail in reversed(self.outbox):
            if mail["to"] == to_email:
                m = pattern.search(mail["body"])
                if m:
                    return m.group(1)
        raise AssertionError(f"no matching mail sent to {to_email}")

    def last_otp(self, to_email):
        return self._last_match(to_email, OTP_RE)

    def last_reset_token(self, to_email):
        return self._last_match(to_email, RESET_RE)


class FakeImageHost:
    def __init__(self):
        self.uploads = []

    def upload(self, file_path):
        path = Path(file_path)
        self.uploads.append({"path": path, "data": path.read_bytes()})
        return f"https://images.example.com/images/{path.name}"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def mailer():
    fake = FakeEmailSender()
    app.dependency_overrides[get_email_sender] = lambda: fake
    return fake


@pytest.fixture()
def image_host():
    fake = FakeImageHost()
    app.dependency_overrides[get_image_host] = lambda: fake
    return fake


@pytest.fixture()
def client(mailer, image_host):
    return TestClient(app)


def registration(email="a@x.com", password="secret123", mobile="5550001"):
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": email,
        "password": password,
        "gender": "Female",
        "mobileNumber": mobile,
    }


@pytest.fixture()
def register(client):
    def _register(email="a@x.com", password="secret123", mobile="5550001"):
        resp = client.post("/api/auth/register", json=registration(email, password, mobile))
        assert resp.status_code == 201, resp.text
        return resp

    return _register


@pytest.fixture()
def verified_user(client, mailer, register):
    """Register + verify; returns a callable giving (email, password)."""

    def _make(email="a@x.com", password="secret123", mobile="5550001"):
        register(email, password, mobile)
        resp = client.post(
            "/api/auth/verify-otp",
            json={"email": email, "otp": mailer.last_otp(email)},
        )
        assert resp.status_code == 200, resp.text
        return email, password

    return _make


@pytest.fixture()
def login(client):
    def _login(email, password):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()["token"]

    return _login


@pytest.fixture()
def user_token(verified_user, login):
    return login(*verified_user())


@pytest.fixture()
def admin_token(db_session, login):
    from app.db.init_db import ensure_default_admin

    ensure_default_admin(db_session)
    return login("root@example.com", "RootPass123")
