"""
RegistrationService
===================

Process-level service for self-registration:

``Requested -> PendingActivation -> Activated``

- ``request_registration`` checks the email, signs the pending registration
  plus a 4-digit code into an activation token and asks the mailer to deliver
  the code. Nothing is persisted.
- ``activate_account`` verifies the token, compares the code, creates the
  user and starts its first session.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from coursehub.services._shared.base import BaseService, ServiceContext
from coursehub.services._shared.errors import (
    ActivationCodeMismatchError,
    DuplicateEmailError,
    EmailDeliveryFailedError,
    TokenInvalidError,
)
from coursehub.services._shared.ports import Mailer, TokenCodec, TokenDomain, UserStore
from coursehub.services._shared.ports.user_store import normalize_email
from coursehub.services.auth.service import AuthService
from coursehub.services.identity.dto import UserPublicOut
from coursehub.services.registration.dto import (
    ActivationIn,
    ActivationOut,
    PendingRegistration,
    RegistrationIn,
    RegistrationOut,
)

log = logging.getLogger(__name__)

# Shared pool for mail hand-off; delivery waits are bounded per call.
_mail_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="mail")


def generate_activation_code() -> str:
    """Return a random 4-digit numeric code (1000-9999)."""
    return str(1000 + secrets.randbelow(9000))


class RegistrationService(BaseService):
    """
    Orchestrates activation-token issuance, code delivery and account creation.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        codec: TokenCodec,
        mailer: Mailer,
        activation: TokenDomain,
        auth: AuthService,
        delivery_timeout: float = 10.0,
        require_delivery: bool = False,
        executor: Executor | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param users: Persistence collaborator.
        :param codec: Token signing adapter.
        :param mailer: Activation e-mail collaborator.
        :param activation: Activation signing domain.
        :param auth: Session protocol used to start the first session.
        :param delivery_timeout: Seconds to wait for the mailer.
        :param require_delivery: Raise :class:`EmailDeliveryFailedError` instead
            of reporting ``email_delivered=False``.
        :param executor: Where mail hand-off runs (a shared thread pool by default).
        """
        super().__init__(ctx=ctx)
        self.users = users
        self.codec = codec
        self.mailer = mailer
        self.activation = activation
        self.auth = auth
        self.delivery_timeout = delivery_timeout
        self.require_delivery = require_delivery
        self.executor = executor or _mail_executor

    # ------------------------------------------------------------------ #
    # Phase 1: request
    # ------------------------------------------------------------------ #

    def request_registration(self, dto: RegistrationIn) -> RegistrationOut:
        """
        Issue an activation token and deliver its code out of band.

        :param dto: Registration input.
        :returns: Signed token, confirmation message and delivery outcome.
        :raises DuplicateEmailError: If an account already uses the email.
        :raises EmailDeliveryFailedError: Only when delivery is required and fails.
        """
        email = normalize_email(dto.email or "")

        with self.collaborator("user_store"):
            existing = self.users.find_by_email(email)
        if existing is not None:
            raise DuplicateEmailError()

        pending = PendingRegistration(
            name=dto.name,
            email=email,
            password=dto.password,
            password_confirm=dto.password_confirm,
        )
        code = generate_activation_code()
        token = self.codec.issue(
            {"user": pending.to_claims(), "activation_code": code},
            self.activation,
        )

        delivered = self._deliver(pending, code)
        if not delivered and self.require_delivery:
            raise EmailDeliveryFailedError()

        return RegistrationOut(
            activation_token=token,
            message=f"Please check your email: {email} to activate your account!",
            email_delivered=delivered,
        )

    def _deliver(self, pending: PendingRegistration, code: str) -> bool:
        future = self.executor.submit(
            self.mailer.deliver_activation_code,
            to_email=pending.email,
            name=pending.name,
            code=code,
        )
        try:
            future.result(timeout=self.delivery_timeout)
        except FutureTimeoutError:
            log.warning("registration.email.failed", extra={"outcome": "timeout"})
            return False
        except EmailDeliveryFailedError:
            log.warning("registration.email.failed", extra={"outcome": "rejected"})
            return False
        except Exception:
            log.error(
                "registration.email.failed",
                extra={"outcome": "error", "collaborator": "mailer"},
                exc_info=True,
            )
            return False
        return True

    # ------------------------------------------------------------------ #
    # Phase 2: activation
    # ------------------------------------------------------------------ #

    def activate_account(self, dto: ActivationIn) -> ActivationOut:
        """
        Redeem an activation code and create the account.

        Replaying a redeemed token fails with :class:`DuplicateEmailError`
        from the persistence layer.

        :raises TokenExpiredError: Activation token past its expiry.
        :raises TokenInvalidError: Bad signature, wrong domain or malformed payload.
        :raises ActivationCodeMismatchError: Supplied code differs from the embedded one.
        :raises DuplicateEmailError: Account already exists.
        """
        verified = self.codec.verify(dto.activation_token, self.activation)
        try:
            pending = PendingRegistration.from_claims(verified.payload["user"])
            expected = str(verified.payload["activation_code"])
        except (KeyError, TypeError) as exc:
            raise TokenInvalidError() from exc

        supplied = "" if dto.activation_code is None else str(dto.activation_code).strip()
        if not hmac.compare_digest(expected.encode(), supplied.encode()):
            log.info("registration.activation.rejected", extra={"outcome": "code_mismatch"})
            raise ActivationCodeMismatchError()

        with self.collaborator("user_store"):
            user = self.users.create(
                name=pending.name,
                email=pending.email,
                password=pending.password,
                password_confirm=pending.password_confirm,
            )

        tokens = self.auth.start_session(user)
        log.info("registration.activated", extra={"user_id": user.id})
        return ActivationOut(user=UserPublicOut.from_record(user), tokens=tokens)
