# coursehub/services/_shared/base.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from coursehub.services._shared.errors import InternalError, ServiceError

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Wrap collaborator calls so unexpected failures surface as
      :class:`InternalError` instead of driver exceptions.
    * Keep services thin, orchestration-only, no web/ORM leakage.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- Error handling ------------------------------

    @contextmanager
    def collaborator(self, name: str) -> Iterator[None]:
        """
        Run a collaborator call, translating unexpected exceptions.

        :class:`ServiceError` subclasses pass through untouched; anything else
        is logged with traceback and re-raised as :class:`InternalError`.

        :param name: Collaborator label used in logs (e.g. ``"user_store"``).
        :type name: str
        :raises InternalError: On unexpected collaborator failure.
        """
        try:
            yield
        except ServiceError:
            raise
        except Exception as exc:
            log.error(
                "collaborator.failure",
                extra={
                    "collaborator": name,
                    "actor_id": self.ctx.actor_id,
                    "request_id": self.ctx.request_id,
                },
                exc_info=True,
            )
            raise InternalError() from exc
