"""
Allocation des numéros de commande (PO-0001, PO-0002, ...) par projet.

Compteur dédié (project_order_counters) verrouillé par SELECT ... FOR UPDATE
jusqu'à la fin de la transaction appelante :
- deux créations concurrentes sur un même projet ne peuvent pas obtenir
  le même numéro
- rollback de l'appelant => le numéro n'est pas consommé

Le pattern "COUNT(*) + 1 sur orders" est interdit : deux transactions
comptent la même base avant que l'une ait commité son insert.

Ne fait jamais de commit : la transaction appartient à l'appelant.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from buildorders.app.db.models.models_v1 import OrderNumberCounter
from buildorders.services.errors import AllocationError

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "PO-"
ORDER_NUMBER_WIDTH = 4


def format_order_number(ordinal: int) -> str:
    # largeur fixe 4, s'élargit au-delà de 9999 sans tronquer
    return f"{ORDER_NUMBER_PREFIX}{ordinal:0{ORDER_NUMBER_WIDTH}d}"


def _lock_counter(db: Session, project_id: uuid.UUID) -> OrderNumberCounter | None:
    return db.execute(
        select(OrderNumberCounter)
        .where(OrderNumberCounter.project_id == project_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def next_order_ordinal(db: Session, project_id: uuid.UUID) -> int:
    """
    Incrémente et retourne le compteur du projet (toujours > 0).

    Lève AllocationError si le verrou ne peut pas être obtenu.
    """
    try:
        counter = _lock_counter(db, project_id)

        if counter is None:
            # Première commande du projet : création du compteur dans un
            # SAVEPOINT, un autre worker peut l'insérer en même temps.
            savepoint = db.begin_nested()
            try:
                counter = OrderNumberCounter(project_id=project_id, last_value=1)
                db.add(counter)
                db.flush()
                savepoint.commit()
                logger.debug("Order counter created for project %s", project_id)
                return 1
            except IntegrityError:
                savepoint.rollback()
                logger.debug("Order counter race for project %s, re-locking", project_id)
                counter = _lock_counter(db, project_id)
                if counter is None:
                    raise AllocationError(
                        "Order counter vanished during allocation",
                        project_id=str(project_id),
                    )

        counter.last_value += 1
        db.flush()
    except OperationalError as exc:
        # lock_timeout Postgres / "database is locked" SQLite
        raise AllocationError(
            "Could not allocate order number (lock timeout)",
            project_id=str(project_id),
        ) from exc

    logger.debug("Allocated order ordinal %s for project %s", counter.last_value, project_id)
    return counter.last_value


def allocate_order_number(db: Session, project_id: uuid.UUID) -> str:
    return format_order_number(next_order_ordinal(db, project_id))
