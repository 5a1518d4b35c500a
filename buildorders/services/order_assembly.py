from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Sequence

from buildorders.services.errors import InvalidItemError

# Échelles des colonnes order_items (Numeric(14, 3) / Numeric(14, 2))
QUANTITY_DECIMALS = 3
PRICE_DECIMALS = 2


class LineItemLike(Protocol):
    material_id: str
    quantity: Decimal
    unit_price: Decimal | None


@dataclass(frozen=True)
class AssembledOrder:
    line_totals: list[Decimal]
    total_estimated: Decimal


def _decimals(value: Decimal) -> int:
    exponent = Decimal(value).normalize().as_tuple().exponent
    return max(0, -exponent)


def line_total(quantity: Decimal, unit_price: Decimal | None) -> Decimal:
    """quantité × prix unitaire, exact (pas d'arrondi) ; prix absent => 0."""
    if unit_price is None:
        return Decimal("0")
    return Decimal(quantity) * Decimal(unit_price)


def assemble_items(items: Sequence[LineItemLike]) -> AssembledOrder:
    """
    Valide et totalise les lignes d'une commande.

    Règles :
    - liste non vide
    - quantité strictement > 0, au plus 3 décimales
    - prix unitaire >= 0 s'il est fourni, au plus 2 décimales

    Les valeurs acceptées sont stockées telles quelles, et les totaux sont
    exacts : total_estimated == sum(quantity * unit_price) sur les lignes
    relues en base.
    """
    if not items:
        raise InvalidItemError("Order must contain at least one item")

    line_totals: list[Decimal] = []
    for idx, item in enumerate(items):
        if not item.material_id:
            raise InvalidItemError(f"Item {idx}: material_id is required", index=idx)
        if item.quantity is None or Decimal(item.quantity) <= 0:
            raise InvalidItemError(f"Item {idx}: quantity must be > 0", index=idx)
        if _decimals(item.quantity) > QUANTITY_DECIMALS:
            raise InvalidItemError(
                f"Item {idx}: quantity allows at most {QUANTITY_DECIMALS} decimal places", index=idx
            )
        if item.unit_price is not None:
            if Decimal(item.unit_price) < 0:
                raise InvalidItemError(f"Item {idx}: unit_price must be >= 0", index=idx)
            if _decimals(item.unit_price) > PRICE_DECIMALS:
                raise InvalidItemError(
                    f"Item {idx}: unit_price allows at most {PRICE_DECIMALS} decimal places", index=idx
                )
        line_totals.append(line_total(item.quantity, item.unit_price))

    return AssembledOrder(
        line_totals=line_totals,
        total_estimated=sum(line_totals, Decimal("0")),
    )
