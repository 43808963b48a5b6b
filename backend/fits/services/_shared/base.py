"""Base class for application services."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fits.models.base import utcnow
from fits.services._shared.errors import ValidationError
from fits.uow.base import UnitOfWork
from fits.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

UowFactory = Callable[[], UnitOfWork]

USERNAME_MAX_LENGTH = 50


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide read-only and read-write units of work.
    * Provide the clock, so every timestamp inside one use-case comes from
      the same source.

    Notes
    -----
    - Services never touch the global session directly; always use a UoW.
    - Services hold no mutable per-request state and are safe to share.
    """

    def __init__(
        self,
        *,
        uow_factory: UowFactory | None = None,
        ro_uow_factory: UowFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        :param uow_factory: Builds a read-write unit of work.
        :param ro_uow_factory: Builds a read-only unit of work.
        :param clock: Returns the current aware UTC time.
        """
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork
        self._ro_uow_factory = ro_uow_factory or SQLAlchemyReadOnlyUnitOfWork
        self._clock = clock or utcnow

    def rw_uow(self) -> UnitOfWork:
        return self._uow_factory()

    def ro_uow(self) -> UnitOfWork:
        return self._ro_uow_factory()

    def now(self) -> datetime:
        return self._clock()

    @staticmethod
    def require_username(username: str) -> str:
        """Return ``username`` trimmed.

        :raises ValidationError: When empty or longer than 50 characters.
        """
        value = (username or "").strip()
        if not value or len(value) > USERNAME_MAX_LENGTH:
            raise ValidationError(
                "Invalid username",
                details={"username": [f"Must be 1-{USERNAME_MAX_LENGTH} characters."]},
            )
        return value
