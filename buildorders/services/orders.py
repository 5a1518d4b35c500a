"""
Création de commande : workflow transactionnel.

Une seule unité de travail :
    0. assemblage des lignes (pur, avant tout accès DB)
    1. verrou FOR UPDATE sur la ligne budget du projet
    2. projet existant, sinon NotFoundError
    3. évaluation budget => statut DRAFT / PENDING_APPROVAL
    4. numéro de commande (compteur verrouillé, même transaction)
    5. insert commande
    6. insert lignes
    7. committed_amount += total estimé (si budget)
    8. commit

Toute erreur entre 1 et 7 => rollback complet : ni commande, ni lignes,
ni mise à jour budget. Pas de retry ici, l'appelant peut rejouer.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from buildorders.app.core.config import settings
from buildorders.app.db.models.models_v1 import Order, OrderItem, ProjectBudget
from buildorders.app.db.models.core_types import OrderStatus
from buildorders.app.db.unit_of_work import SqlAlchemyUnitOfWork
from buildorders.app.schemas.orders import OrderCreate
from buildorders.services.access import CurrentUser, get_project
from buildorders.services.budget import BudgetFigures, BudgetImpact, evaluate_budget
from buildorders.services.errors import (
    AllocationError,
    NotFoundError,
    OrderingError,
    PersistenceError,
)
from buildorders.services.order_assembly import assemble_items
from buildorders.services.order_numbers import allocate_order_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderCreationResult:
    order: Order
    budget: BudgetImpact


def lock_project_budget(db: Session, project_id: uuid.UUID) -> ProjectBudget | None:
    """Lecture exclusive (FOR UPDATE) de la ligne budget, tenue jusqu'au commit."""
    try:
        return db.execute(
            select(ProjectBudget)
            .where(ProjectBudget.project_id == project_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
    except OperationalError as exc:
        raise AllocationError(
            "Could not lock project budget (lock timeout)",
            project_id=str(project_id),
        ) from exc


def create_order(
    uow: SqlAlchemyUnitOfWork,
    *,
    actor: CurrentUser,
    payload: OrderCreate,
) -> OrderCreationResult:
    # Validation pure avant de toucher la DB (InvalidItemError)
    assembled = assemble_items(payload.items)
    currency = (payload.currency or settings.default_currency).upper()

    db = uow.db
    try:
        uow.apply_lock_timeout()

        budget = lock_project_budget(db, payload.project_id)
        if get_project(db, payload.project_id) is None:
            raise NotFoundError("Project not found", project_id=str(payload.project_id))

        figures = None
        if budget is not None:
            figures = BudgetFigures(
                total_budget=budget.total_budget,
                committed_amount=budget.committed_amount,
            )
        impact = evaluate_budget(figures, assembled.total_estimated)
        status = OrderStatus.pending_approval if impact.over_budget else OrderStatus.draft

        order_number = allocate_order_number(db, payload.project_id)

        order = Order(
            project_id=payload.project_id,
            created_by_id=actor.id,
            requested_by_id=payload.requested_by_id,
            order_number=order_number,
            status=status,
            required_date=payload.required_date,
            total_estimated=assembled.total_estimated,
            total_received=0,
            currency=currency,
            notes=payload.notes,
        )
        db.add(order)
        db.flush()

        for position, (item, line_total) in enumerate(zip(payload.items, assembled.line_totals)):
            order.items.append(
                OrderItem(
                    position=position,
                    material_id=item.material_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    currency=currency,
                    attributes=item.attributes,
                    line_total=line_total,
                )
            )
        db.flush()

        if budget is not None:
            budget.committed_amount = budget.committed_amount + assembled.total_estimated
            db.flush()

        uow.commit()
    except OrderingError as exc:
        uow.rollback()
        logger.warning("Order creation aborted for project %s: %s", payload.project_id, exc)
        raise
    except SQLAlchemyError as exc:
        uow.rollback()
        logger.exception("Order creation failed for project %s, rolled back", payload.project_id)
        raise PersistenceError("Failed to create order", project_id=str(payload.project_id)) from exc

    logger.info(
        "Order %s created for project %s: status=%s total=%s percent_after=%.2f",
        order.order_number,
        order.project_id,
        order.status.value,
        order.total_estimated,
        impact.percent_after,
    )
    if impact.over_budget:
        logger.warning("Order %s exceeds project budget, pending approval", order.order_number)
    elif impact.near_threshold:
        logger.warning("Order %s brings project near its budget limit", order.order_number)

    return OrderCreationResult(order=order, budget=impact)


def list_orders_for_project(db: Session, project_id: uuid.UUID) -> list[Order]:
    rows = db.execute(
        select(Order)
        .where(Order.project_id == project_id)
        .where(Order.deleted_at.is_(None))
        .order_by(Order.created_at.desc(), Order.order_number.desc())
    ).scalars().all()
    return list(rows)


def get_order(db: Session, order_id: uuid.UUID) -> Order | None:
    return db.execute(
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.id == order_id)
        .where(Order.deleted_at.is_(None))
    ).scalar_one_or_none()
