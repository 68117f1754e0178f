import os

os.environ.setdefault("TURNSTILE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("CONTACT_EMAIL_TO", "contacto@pixeltermo.com.ar")
os.environ.setdefault("MAIL_TRANSPORT", "smtp")
os.environ.setdefault("MAIL_SERVER", "smtp.example.com")
os.environ.setdefault("MAIL_PORT", "587")
os.environ.setdefault("MAIL_USERNAME", "mailer@example.com")
os.environ.setdefault("MAIL_PASSWORD", "smtp-password")
os.environ.setdefault("MAIL_FROM", "noreply@pixeltermo.com.ar")
os.environ.setdefault("MAIL_FROM_NAME", "PIXEL TERMO - Formulario de Contacto")

import aiosmtplib
import pytest
from fastapi.testclient import TestClient

from service.email import get_mailer
from service.turnstile import VerificationResult, get_verifier


class FakeVerifier:
    def __init__(self, success=True, error_codes=None):
        self.result = VerificationResult(success, tuple(error_codes or ()))
        self.calls = []

    async def check(self, token, remote_ip=None):
        self.calls.append((token, remote_ip))
        return self.result

    async def verify(self, token, remote_ip=None):
        return (await self.check(token, remote_ip)).success


class FakeMailer:
    name = "fake"

    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def deliver(self, submission, composed):
        if self.error is not None:
            raise self.error
        self.sent.append((submission, composed))


@pytest.fixture
def valid_body():
    return {
        "name": "Ana",
        "email": "ana@example.com",
        "phone": "",
        "message": "Hola",
        "cf-turnstile-response": "valid",
    }


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(verifier, mailer):
    from main import app

    app.dependency_overrides[get_verifier] = lambda: verifier
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()



class FakeSmtpSession:
    """Stands in for the network side of ``aiosmtplib.SMTP``"""

    def __init__(self):
        self.send_error = None
        self.sent = []

    def install(self, monkeypatch):
        async def succeed(smtp, *args, **kwargs):
            return None

        async def send_message(smtp, message, *args, **kwargs):
            if self.send_error is not None:
                raise self.send_error
            self.sent.append(message)
            return {}, "OK"

        for method in ("connect", "starttls", "login", "quit"):
            monkeypatch.setattr(aiosmtplib.SMTP, method, succeed)
        monkeypatch.setattr(aiosmtplib.SMTP, "send_message", send_message)


@pytest.fixture
def smtp_session(monkeypatch):
    session = FakeSmtpSession()
    session.install(monkeypatch)
    return session
