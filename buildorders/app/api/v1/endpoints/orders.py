from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from buildorders.app.api.deps import get_current_user, get_db, get_uow
from buildorders.app.db.models.models_v1 import Order
from buildorders.app.db.unit_of_work import SqlAlchemyUnitOfWork
from buildorders.app.schemas.orders import BudgetImpactRead, OrderCreate
from buildorders.services.access import (
    CurrentUser,
    ensure_can_create_orders,
    ensure_project_access,
)
from buildorders.services.catalog import get_suggested_materials
from buildorders.services.errors import OrderingError
from buildorders.services.orders import create_order, get_order, list_orders_for_project

router = APIRouter(prefix="/orders")


def _http_error(exc: OrderingError) -> HTTPException:
    # PersistenceError : message générique, le détail est dans les logs
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def _order_summary(o: Order) -> dict:
    return {
        "id": o.id,
        "project_id": o.project_id,
        "order_number": o.order_number,
        "status": o.status,
        "required_date": o.required_date,
        "total_estimated": float(o.total_estimated),
        "total_received": float(o.total_received),
        "currency": o.currency,
        "notes": o.notes,
        "created_by_id": o.created_by_id,
        "requested_by_id": o.requested_by_id,
        "created_at": o.created_at,
        "updated_at": o.updated_at,
    }


def _order_detail(o: Order) -> dict:
    data = _order_summary(o)
    data["items"] = [
        {
            "id": it.id,
            "material_id": it.material_id,
            "quantity": float(it.quantity),
            "unit_price": float(it.unit_price) if it.unit_price is not None else None,
            "currency": it.currency,
            "attributes": it.attributes,
            "line_total": float(it.line_total),
        }
        for it in o.items
    ]
    return data


@router.get("")
def list_orders(
    project_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    try:
        ensure_project_access(db, user, project_id)
    except OrderingError as exc:
        raise _http_error(exc)

    return [_order_summary(o) for o in list_orders_for_project(db, project_id)]


@router.post("", status_code=201)
def create_order_endpoint(
    payload: OrderCreate,
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    user: CurrentUser = Depends(get_current_user),
):
    try:
        ensure_can_create_orders(user)
        ensure_project_access(uow.db, user, payload.project_id)
        # fin de la lecture d'accès avant d'ouvrir la transaction de création
        uow.rollback()

        result = create_order(uow, actor=user, payload=payload)
    except OrderingError as exc:
        raise _http_error(exc)

    budget_info = BudgetImpactRead(
        percent_after=round(float(result.budget.percent_after), 2),
        near_threshold=result.budget.near_threshold,
        over_budget=result.budget.over_budget,
    )
    return {
        "order": _order_detail(result.order),
        "budget_info": budget_info.model_dump(),
        "message": result.budget.message,
    }


@router.get("/suggestions/by-phase")
def suggestions_by_phase(
    project_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    try:
        project = ensure_project_access(db, user, project_id)
    except OrderingError as exc:
        raise _http_error(exc)

    materials = get_suggested_materials(db, project.phase)
    return {
        "phase": project.phase,
        "materials": [
            {
                "id": m.id,
                "sku": m.sku,
                "name": m.name,
                "category": m.category,
                "unit_of_measure": m.unit_of_measure,
                "phase_hint": m.phase_hint,
            }
            for m in materials
        ],
    }


@router.get("/{order_id}")
def get_order_endpoint(
    order_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    order = get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    try:
        ensure_project_access(db, user, order.project_id)
    except OrderingError as exc:
        raise _http_error(exc)

    return _order_detail(order)
