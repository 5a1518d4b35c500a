"""Création de projet (ADMIN uniquement), avec ligne budget optionnelle."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from buildorders.app.db.models.core_types import Role
from buildorders.app.db.models.models_v1 import Project, ProjectBudget
from buildorders.app.schemas.projects import ProjectCreate
from buildorders.services.access import CurrentUser
from buildorders.services.errors import AccessDeniedError, ConflictError

logger = logging.getLogger(__name__)


def create_project(db: Session, *, actor: CurrentUser, payload: ProjectCreate) -> Project:
    if actor.role != Role.admin:
        raise AccessDeniedError("Only Admin can create projects", role=actor.role.value)

    exists = db.execute(select(Project.id).where(Project.code == payload.code)).first()
    if exists:
        raise ConflictError("Project code already exists", code=payload.code)

    project = Project(
        name=payload.name,
        code=payload.code,
        description=payload.description,
        phase=payload.phase,
        location=payload.location,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    db.add(project)
    try:
        db.flush()
        if payload.total_budget is not None:
            db.add(ProjectBudget(project_id=project.id, total_budget=payload.total_budget))
        db.commit()
    except IntegrityError as exc:
        # même code inséré en parallèle
        db.rollback()
        raise ConflictError("Project code already exists", code=payload.code) from exc

    logger.info("Project %s created by %s", project.code, actor.id)
    return project
