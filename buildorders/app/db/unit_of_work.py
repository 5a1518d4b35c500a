from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import text
from sqlalchemy.orm import Session

from buildorders.app.core.config import settings

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """
    Unité de travail explicite, une par requête.

    Ouvre une Session, la passe au workflow, puis commit/rollback d'un bloc.
    Toute exception (y compris annulation de l'appelant) => rollback complet.

        with SqlAlchemyUnitOfWork(SessionLocal) as uow:
            create_order(uow, ...)
            uow.commit()
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        lock_timeout_ms: int | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._lock_timeout_ms = settings.lock_timeout_ms if lock_timeout_ms is None else lock_timeout_ms
        self.session: Session | None = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._session_factory()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                logger.warning("Rolling back unit of work after %s", exc_type.__name__)
                self.rollback()
        finally:
            self.session.close()
            self.session = None

    @property
    def db(self) -> Session:
        if self.session is None:
            raise RuntimeError("Unit of work is not active")
        return self.session

    def apply_lock_timeout(self) -> None:
        # Postgres uniquement ; SQLite utilise le busy timeout de la connexion
        if self.db.get_bind().dialect.name == "postgresql" and self._lock_timeout_ms > 0:
            self.db.execute(text(f"SET LOCAL lock_timeout = '{int(self._lock_timeout_ms)}ms'"))

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
