from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol

from coursehub.services._shared.errors import EmailDeliveryFailedError


class Mailer(Protocol):
    """Port for transactional e-mail delivery."""

    def deliver_activation_code(self, *, to_email: str, name: str, code: str) -> None:
        """
        Render and send the account activation e-mail.

        :raises EmailDeliveryFailedError: When the message could not be handed off.
        """


@dataclass(frozen=True, slots=True)
class SentActivation:
    to_email: str
    name: str
    code: str


class RecordingMailer(Mailer):
    """Keeps activation messages in memory; can be told to fail."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[SentActivation] = []
        self._lock = threading.Lock()

    def deliver_activation_code(self, *, to_email: str, name: str, code: str) -> None:
        if self.fail:
            raise EmailDeliveryFailedError()
        with self._lock:
            self.sent.append(SentActivation(to_email=to_email, name=name, code=code))

    @property
    def last(self) -> SentActivation | None:
        return self.sent[-1] if self.sent else None
