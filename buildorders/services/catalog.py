from __future__ import annotations

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from buildorders.app.db.models.models_v1 import Material

SUGGESTION_LIMIT = 50


def get_suggested_materials(db: Session, phase: str) -> list[Material]:
    """Matériaux actifs pour la phase du projet (ou sans phase), par catégorie puis nom."""
    rows = db.execute(
        select(Material)
        .where(Material.is_active.is_(True))
        .where(or_(Material.phase_hint == phase, Material.phase_hint.is_(None)))
        .order_by(Material.category, Material.name)
        .limit(SUGGESTION_LIMIT)
    ).scalars().all()
    return list(rows)
