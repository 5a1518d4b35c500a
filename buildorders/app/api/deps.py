from __future__ import annotations

import uuid
from typing import Generator

from fastapi import Header, HTTPException

from buildorders.app.db.models.core_types import Role
from buildorders.app.db.session import SessionLocal
from buildorders.app.db.unit_of_work import SqlAlchemyUnitOfWork
from buildorders.services.access import CurrentUser

def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_uow() -> Generator:
    with SqlAlchemyUnitOfWork(SessionLocal) as uow:
        yield uow


def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_role: str | None = Header(default=None, alias="X-User-Role"),
) -> CurrentUser:
    # Identité fournie en amont (gateway / vérif du token), hors périmètre ici
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return CurrentUser(id=uuid.UUID(x_user_id), role=Role(x_user_role.strip().upper()))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid identity headers")
