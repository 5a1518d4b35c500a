from decimal import Decimal

from sqlalchemy import func, select

from buildorders.app.db.models.models_v1 import Project, ProjectBudget


def _project_body(**extra):
    body = {"name": "Depot C", "code": "DPT-C", "phase": "EARTHWORKS", "location": "North yard"}
    body.update(extra)
    return body


def _project_count(session_factory) -> int:
    with session_factory() as db:
        return db.execute(select(func.count()).select_from(Project)).scalar_one()


def test_admin_creates_project(client, seed, session_factory, auth_headers):
    resp = client.post("/v1/projects", json=_project_body(), headers=auth_headers(seed.admin))

    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["message"] == "Project created"
    assert data["project"]["code"] == "DPT-C"
    assert data["project"]["phase"] == "EARTHWORKS"
    assert data["project"]["is_active"] is True

    listed = [p["code"] for p in client.get("/v1/projects", headers=auth_headers(seed.admin)).json()]
    assert listed == ["BRG-B", "DPT-C", "TWR-A"]
    with session_factory() as db:
        # pas de total_budget => pas de ligne budget
        project = db.execute(select(Project).where(Project.code == "DPT-C")).scalar_one()
        assert db.get(ProjectBudget, project.id) is None


def test_create_project_with_initial_budget(client, seed, session_factory, auth_headers):
    resp = client.post("/v1/projects", json=_project_body(total_budget="250000.00"), headers=auth_headers(seed.admin))

    assert resp.status_code == 201, resp.text
    with session_factory() as db:
        project = db.execute(select(Project).where(Project.code == "DPT-C")).scalar_one()
        budget = db.get(ProjectBudget, project.id)
        assert budget.total_budget == Decimal("250000")
        assert budget.committed_amount == 0


def test_create_project_admin_only(client, seed, session_factory, auth_headers):
    for user in (seed.engineer, seed.buyer):
        resp = client.post("/v1/projects", json=_project_body(), headers=auth_headers(user))
        assert resp.status_code == 403

    assert client.post("/v1/projects", json=_project_body()).status_code == 401
    assert _project_count(session_factory) == 2


def test_create_project_requires_name_code_phase(client, seed, session_factory, auth_headers):
    headers = auth_headers(seed.admin)

    for missing in ("name", "code", "phase"):
        body = _project_body()
        del body[missing]
        assert client.post("/v1/projects", json=body, headers=headers).status_code == 422
    assert client.post("/v1/projects", json=_project_body(phase=""), headers=headers).status_code == 422

    assert _project_count(session_factory) == 2


def test_create_project_duplicate_code(client, seed, session_factory, auth_headers):
    resp = client.post("/v1/projects", json=_project_body(code="TWR-A"), headers=auth_headers(seed.admin))

    assert resp.status_code == 409
    assert resp.json()["detail"] == "Project code already exists"
    assert _project_count(session_factory) == 2
