"""
Évaluation budgétaire d'une commande.

Calcul pur, aucun accès DB : le workflow lui passe les chiffres du budget
déjà verrouillé.

    percent_after = (committed + new_estimate) / total_budget * 100

Classification :
    < 80            normal
    >= 80 et < 100  proche du seuil (informatif)
    >= 100          dépassement => commande en PENDING_APPROVAL
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

NEAR_THRESHOLD_PERCENT = Decimal("80")
OVER_BUDGET_PERCENT = Decimal("100")


@dataclass(frozen=True)
class BudgetFigures:
    total_budget: Decimal
    committed_amount: Decimal


@dataclass(frozen=True)
class BudgetImpact:
    percent_after: Decimal
    near_threshold: bool
    over_budget: bool

    @property
    def message(self) -> str:
        if self.over_budget:
            return "Order created and flagged for approval (budget exceeded)"
        if self.near_threshold:
            return "Order created (warning: approaching budget limit)"
        return "Order created"


NO_BUDGET_IMPACT = BudgetImpact(percent_after=Decimal("0"), near_threshold=False, over_budget=False)


def evaluate_budget(budget: BudgetFigures | None, new_estimate: Decimal) -> BudgetImpact:
    # Pas de ligne budget : commande admise sans contrôle
    if budget is None:
        return NO_BUDGET_IMPACT

    total = Decimal(budget.total_budget)
    # total <= 0 = "pas de budget configuré", pas une division par zéro
    if total <= 0:
        return NO_BUDGET_IMPACT

    percent_after = (Decimal(budget.committed_amount) + Decimal(new_estimate)) / total * 100
    return BudgetImpact(
        percent_after=percent_after,
        near_threshold=NEAR_THRESHOLD_PERCENT <= percent_after < OVER_BUDGET_PERCENT,
        over_budget=percent_after >= OVER_BUDGET_PERCENT,
    )
