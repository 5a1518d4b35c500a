import os
import uuid
from dataclasses import dataclass
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from buildorders.app.api.deps import get_db, get_uow
from buildorders.app.db.base import Base
from buildorders.app.db.models.core_types import Role
from buildorders.app.db.models.models_v1 import (
    Material,
    Project,
    ProjectBudget,
    User,
    UserProject,
)
from buildorders.app.db.session import make_engine, make_session_factory
from buildorders.app.db.unit_of_work import SqlAlchemyUnitOfWork
from buildorders.app.main import app
from buildorders.services.access import CurrentUser


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Base isolée par test.

    SQLite fichier (BEGIN IMMEDIATE => vraie sérialisation entre threads)
    par défaut ; TEST_DATABASE_URL pour jouer la suite sur PostgreSQL.
    Les tests commitent réellement : nécessaire pour la concurrence.
    """
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'buildorders_test.db'}"
    engine = make_engine(url)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return make_session_factory(engine)


@pytest.fixture(scope="function")
def uow_factory(session_factory):
    def _make() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return _make


@dataclass
class Seed:
    admin: CurrentUser
    engineer: CurrentUser
    outsider: CurrentUser
    buyer: CurrentUser
    project_id: uuid.UUID
    other_project_id: uuid.UUID


@pytest.fixture(scope="function")
def seed(session_factory) -> Seed:
    """Deux projets (sans budget), quatre utilisateurs, trois matériaux."""
    with session_factory() as db:
        admin = User(username="admin", full_name="Admin", role=Role.admin)
        engineer = User(username="engineer", full_name="Site Engineer", role=Role.site_engineer)
        outsider = User(username="outsider", full_name="Other Engineer", role=Role.site_engineer)
        buyer = User(username="buyer", full_name="Procurement", role=Role.procurement)
        project = Project(name="Tower A", code="TWR-A", phase="FOUNDATION")
        other = Project(name="Bridge B", code="BRG-B", phase="STRUCTURE")
        db.add_all([admin, engineer, outsider, buyer, project, other])
        db.flush()

        db.add_all(
            [
                UserProject(user_id=engineer.id, project_id=project.id),
                UserProject(user_id=buyer.id, project_id=project.id),
                UserProject(user_id=outsider.id, project_id=other.id),
                Material(id="MAT-001", sku="CEM-50KG", name="Cement 50kg", category="Concrete", phase_hint="FOUNDATION"),
                Material(id="MAT-002", sku="REBAR-12", name="Rebar 12mm", category="Steel", phase_hint="STRUCTURE"),
                Material(id="MAT-003", sku="SAND-M3", name="Sand", category="Aggregates", phase_hint=None),
            ]
        )
        db.commit()

        return Seed(
            admin=CurrentUser(id=admin.id, role=Role.admin),
            engineer=CurrentUser(id=engineer.id, role=Role.site_engineer),
            outsider=CurrentUser(id=outsider.id, role=Role.site_engineer),
            buyer=CurrentUser(id=buyer.id, role=Role.procurement),
            project_id=project.id,
            other_project_id=other.id,
        )


@pytest.fixture(scope="function")
def set_budget(session_factory):
    def _set(project_id: uuid.UUID, total: str, committed: str = "0") -> None:
        with session_factory() as db:
            db.add(
                ProjectBudget(
                    project_id=project_id,
                    total_budget=Decimal(total),
                    committed_amount=Decimal(committed),
                    spent_amount=Decimal("0"),
                )
            )
            db.commit()

    return _set


@pytest.fixture(scope="function")
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def _get_uow():
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            yield uow

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_uow] = _get_uow
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: CurrentUser) -> dict:
        return {"X-User-Id": str(user.id), "X-User-Role": user.role.value}

    return _headers
