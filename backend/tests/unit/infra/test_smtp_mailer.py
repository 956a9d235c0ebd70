"""Tests for the SMTP mailer with ``smtplib.SMTP`` replaced by a fake."""

from __future__ import annotations

import smtplib

import pytest

from coursehub.infra.mail.smtp_mailer import SMTPMailer
from coursehub.services._shared.errors import EmailDeliveryFailedError


class FakeSMTP:
    """Records the calls a real SMTP session would receive."""

    instances: list[FakeSMTP] = []
    fail_with: Exception | None = None

    def __init__(self, host, port, timeout):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls: list[str] = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.calls.append("quit")
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(f"login:{user}")

    def send_message(self, message):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        self.messages.append(message)


@pytest.fixture(autouse=True)
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _mailer(**overrides) -> SMTPMailer:
    params = dict(
        host="smtp.test",
        port=587,
        sender="no-reply@coursehub.test",
        username="no-reply@coursehub.test",
        password="pw",
        use_tls=True,
        timeout=3.0,
    )
    params.update(overrides)
    return SMTPMailer(**params)


def test_activation_mail_contains_name_and_code(fake_smtp):
    _mailer().deliver_activation_code(to_email="ada@x.io", name="Ada", code="4821")

    conn = fake_smtp.instances[-1]
    assert conn.calls == ["starttls", "login:no-reply@coursehub.test", "quit"]
    message = conn.messages[0]
    assert message["To"] == "ada@x.io"
    assert message["Subject"] == "Activate Your Account"
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "Ada" in html
    assert "4821" in html


def test_plain_relay_skips_tls_and_login(fake_smtp):
    _mailer(use_tls=False, password=None).deliver_activation_code(
        to_email="ada@x.io", name="Ada", code="1234"
    )

    assert fake_smtp.instances[-1].calls == ["quit"]


def test_template_escapes_user_supplied_name():
    html = _mailer().render(
        "email/activation.html", name="<b>Ada</b>", activation_code="1234", expires_in="2 hours"
    )

    assert "<b>Ada</b>" not in html
    assert "&lt;b&gt;Ada&lt;/b&gt;" in html


@pytest.mark.parametrize(
    "error", [smtplib.SMTPRecipientsRefused({}), ConnectionRefusedError()], ids=["smtp", "socket"]
)
def test_transport_failures_raise_delivery_failed(fake_smtp, error):
    fake_smtp.fail_with = error

    with pytest.raises(EmailDeliveryFailedError):
        _mailer().deliver_activation_code(to_email="ada@x.io", name="Ada", code="1234")
