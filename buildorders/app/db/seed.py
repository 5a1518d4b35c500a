from __future__ import annotations

from decimal import Decimal
from sqlalchemy import select

from buildorders.app.db.session import SessionLocal
from buildorders.app.db.models.models_v1 import (
    Material,
    Project,
    ProjectBudget,
    User,
    UserProject,
)
from buildorders.app.db.models.core_types import Role

MATERIALS = [
    ("MAT-001", "CEM-50KG", "Cement - 50kg bag", "Concrete", "bag", "FOUNDATION"),
    ("MAT-002", "REBAR-12", "Steel Rebar 12mm", "Steel", "bar", "STRUCTURE"),
    ("MAT-003", "SAND-M3", "Sand (1 m3)", "Aggregates", "m3", None),
]


def run_seed():
    db = SessionLocal()
    try:
        # 1) Utilisateurs
        admin = db.scalar(select(User).where(User.username == "admin"))
        if not admin:
            admin = User(username="admin", full_name="Administrator", role=Role.admin, is_active=True)
            db.add(admin)

        engineer = db.scalar(select(User).where(User.username == "engineer"))
        if not engineer:
            engineer = User(username="engineer", full_name="Site Engineer", role=Role.site_engineer, is_active=True)
            db.add(engineer)
        db.flush()

        # 2) Projet de démo + budget
        project = db.scalar(select(Project).where(Project.code == "DEMO-001"))
        if not project:
            project = Project(name="Demo Tower", code="DEMO-001", phase="FOUNDATION", location="Site A")
            db.add(project)
            db.flush()
            db.add(ProjectBudget(project_id=project.id, total_budget=Decimal("100000.00")))
            db.add(UserProject(user_id=engineer.id, project_id=project.id))

        # 3) Catalogue
        for mat_id, sku, name, category, uom, phase in MATERIALS:
            if not db.get(Material, mat_id):
                db.add(
                    Material(
                        id=mat_id,
                        sku=sku,
                        name=name,
                        category=category,
                        unit_of_measure=uom,
                        phase_hint=phase,
                    )
                )

        db.commit()
        print(f"SEED OK: project=DEMO-001, admin={admin.id}, engineer={engineer.id}")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
