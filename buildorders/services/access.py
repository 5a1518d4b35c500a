"""
Contrôle d'accès aux projets (collaborateur externe du workflow commandes).

- ADMIN : accès à tous les projets
- autres rôles : uniquement les projets assignés (user_projects)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from buildorders.app.db.models.models_v1 import Project, UserProject
from buildorders.app.db.models.core_types import Role, ORDER_CREATOR_ROLES
from buildorders.services.errors import AccessDeniedError, NotFoundError


@dataclass(frozen=True)
class CurrentUser:
    id: uuid.UUID
    role: Role


def get_project(db: Session, project_id: uuid.UUID) -> Project | None:
    return db.execute(
        select(Project)
        .where(Project.id == project_id)
        .where(Project.deleted_at.is_(None))
    ).scalar_one_or_none()


def has_project_access(db: Session, user_id: uuid.UUID, role: Role, project_id: uuid.UUID) -> bool:
    if role == Role.admin:
        return True
    row = db.execute(
        select(UserProject.project_id)
        .where(UserProject.user_id == user_id)
        .where(UserProject.project_id == project_id)
    ).first()
    return row is not None


def ensure_project_access(db: Session, user: CurrentUser, project_id: uuid.UUID) -> Project:
    project = get_project(db, project_id)
    if not project:
        raise NotFoundError("Project not found", project_id=str(project_id))
    if not has_project_access(db, user.id, user.role, project_id):
        raise AccessDeniedError("Forbidden", project_id=str(project_id))
    return project


def ensure_can_create_orders(user: CurrentUser) -> None:
    if user.role not in ORDER_CREATOR_ROLES:
        raise AccessDeniedError("Only Site Engineers or Admin can create orders", role=user.role.value)


def list_projects_for_user(db: Session, user: CurrentUser) -> list[Project]:
    stmt = (
        select(Project)
        .where(Project.deleted_at.is_(None))
        .where(Project.is_active.is_(True))
        .order_by(Project.name)
    )
    if user.role != Role.admin:
        stmt = stmt.join(UserProject, UserProject.project_id == Project.id).where(UserProject.user_id == user.id)
    return list(db.execute(stmt).scalars().all())
