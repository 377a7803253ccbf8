from datetime import timedelta

import pytest
import requests
from fastapi import BackgroundTasks
from jose import jwt

from core.config.settings import EmailConfig
from core.exceptions import AuthenticationError, InvalidRequestError
from core.security.auth import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from core.security.roles import Role, parse_roles, format_roles
from core.services.email_service import EmailService, QueuedEmailService


# ---- roles ----

def test_parse_roles_accepts_mixed_case_and_whitespace():
    assert parse_roles(" user, Dealer ") == {Role.USER, Role.DEALER}


def test_parse_roles_rejects_unknown_tag():
    with pytest.raises(InvalidRequestError):
        parse_roles("USER,SUPERUSER")


def test_parse_roles_of_empty_values():
    assert parse_roles(None) == frozenset()
    assert parse_roles("") == frozenset()


def test_format_roles_uses_stable_order():
    assert format_roles({Role.DEALER, Role.ADMIN, Role.USER}) == "ADMIN,USER,DEALER"


def test_account_role_helpers(make_account):
    account = make_account("kari")
    account.add_role(Role.PRIVATE)

    assert account.roles == "USER,PRIVATE"
    assert account.has_role(Role.PRIVATE)
    assert not account.is_admin
    assert account.role_names == ["USER", "PRIVATE"]


# ---- passwords and sessions ----

def test_password_hash_round_trip():
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert not verify_password("", hashed)


def test_session_token_carries_account_id(make_account):
    account = make_account("ola")
    payload = decode_session_token(create_session_token(account))

    assert payload["sub"] == str(account.id)
    assert payload["username"] == "ola"
    assert payload["type"] == "session"


def test_expired_session_token_is_rejected(make_account):
    account = make_account("ola")
    token = create_session_token(account, expires_delta=timedelta(seconds=-5))

    with pytest.raises(AuthenticationError):
        decode_session_token(token)


def test_token_signed_with_other_key_is_rejected(make_account):
    account = make_account("ola")
    token = jwt.encode({"sub": str(account.id), "type": "session"}, "not-the-secret", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        decode_session_token(token)


# ---- email ----

class StubResponse:
    def raise_for_status(self):
        return None


class StubSession:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        if self.error:
            raise self.error
        return StubResponse()


def test_email_is_posted_to_sendgrid():
    session = StubSession()
    service = EmailService(config=EmailConfig(sendgrid_api_key="key"), session=session)

    assert service.send_welcome("kari@example.com", "kari") is True
    call = session.calls[0]
    assert call["headers"]["Authorization"] == "Bearer key"
    assert call["json"]["personalizations"][0]["to"][0]["email"] == "kari@example.com"


def test_email_failure_is_swallowed():
    session = StubSession(error=requests.ConnectionError("down"))
    service = EmailService(config=EmailConfig(sendgrid_api_key="key"), session=session)

    assert service.send("kari@example.com", "Hello", "<p>hi</p>") is False


def test_email_without_api_key_is_not_sent():
    session = StubSession()
    service = EmailService(config=EmailConfig(sendgrid_api_key=""), session=session)

    assert service.send("kari@example.com", "Hello", "<p>hi</p>") is False
    assert session.calls == []


def test_queued_email_is_only_posted_when_tasks_run():
    session = StubSession()
    service = EmailService(config=EmailConfig(sendgrid_api_key="key"), session=session)
    tasks = BackgroundTasks()
    queued = QueuedEmailService(service, tasks)

    assert queued.send_password_reset("kari@example.com", "abc") is True
    assert session.calls == []
    assert len(tasks.tasks) == 1

    for task in tasks.tasks:
        task.func(*task.args, **task.kwargs)
    assert len(session.calls) == 1
    assert session.calls[0]["json"]["subject"] == "Reset your FCF Motors password"
