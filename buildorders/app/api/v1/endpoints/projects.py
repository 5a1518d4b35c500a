from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from buildorders.app.api.deps import get_current_user, get_db
from buildorders.app.db.models.models_v1 import Project
from buildorders.app.schemas.projects import ProjectCreate
from buildorders.services.access import CurrentUser, ensure_project_access, list_projects_for_user
from buildorders.services.errors import OrderingError
from buildorders.services.projects import create_project

router = APIRouter(prefix="/projects")


def _project_dict(p: Project) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "code": p.code,
        "description": p.description,
        "phase": p.phase,
        "location": p.location,
        "start_date": p.start_date,
        "end_date": p.end_date,
        "is_active": p.is_active,
    }


@router.get("")
def list_projects(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return [_project_dict(p) for p in list_projects_for_user(db, user)]


@router.post("", status_code=201)
def create_project_endpoint(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    try:
        project = create_project(db, actor=user, payload=payload)
    except OrderingError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    return {"project": _project_dict(project), "message": "Project created"}


@router.get("/{project_id}")
def get_project_endpoint(
    project_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    try:
        project = ensure_project_access(db, user, project_id)
    except OrderingError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    return _project_dict(project)
