"""SMTP delivery for transactional e-mail."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from jinja2 import Environment, PackageLoader, select_autoescape

from coursehub.services._shared.errors import EmailDeliveryFailedError
from coursehub.services._shared.ports import Mailer

log = logging.getLogger(__name__)

_templates = Environment(
    loader=PackageLoader("coursehub", "templates"),
    autoescape=select_autoescape(["html"]),
)


class SMTPMailer(Mailer):
    """
    Render Jinja2 templates and hand them to an SMTP relay.

    :param host: SMTP host.
    :param port: SMTP port (587 for STARTTLS).
    :param sender: Envelope and header ``From`` address.
    :param username: Optional login user.
    :param password: Optional login password.
    :param use_tls: Issue ``STARTTLS`` before login.
    :param timeout: Socket timeout in seconds.
    :param sender_name: Display name for ``From``.
    :param expires_in: Human text for the activation window shown in the mail.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        sender_name: str = "CourseHub",
        expires_in: str = "2 hours",
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.sender_name = sender_name
        self.expires_in = expires_in

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout)

    def render(self, template: str, **context: object) -> str:
        return _templates.get_template(template).render(**context)

    def send(self, *, to: str, subject: str, html: str) -> None:
        message = EmailMessage()
        message["From"] = f"{self.sender_name} <{self.sender}>"
        message["To"] = to
        message["Subject"] = subject
        message.set_content("Please view this message in an HTML-capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            with self._new_connection() as conn:
                if self.use_tls:
                    conn.starttls()
                if self.username and self.password:
                    conn.login(self.username, self.password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            log.warning(
                "mail.send_failed",
                extra={"collaborator": "smtp", "outcome": type(exc).__name__},
            )
            raise EmailDeliveryFailedError() from exc

    def deliver_activation_code(self, *, to_email: str, name: str, code: str) -> None:
        html = self.render(
            "email/activation.html",
            name=name,
            activation_code=code,
            expires_in=self.expires_in,
        )
        self.send(to=to_email, subject="Activate Your Account", html=html)
