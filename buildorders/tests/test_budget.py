from decimal import Decimal

import pytest

from buildorders.services.budget import BudgetFigures, evaluate_budget


def _figures(total: str, committed: str) -> BudgetFigures:
    return BudgetFigures(total_budget=Decimal(total), committed_amount=Decimal(committed))


def test_scenario_a_normal():
    impact = evaluate_budget(_figures("1000", "0"), Decimal("500"))

    assert impact.percent_after == Decimal("50")
    assert impact.near_threshold is False
    assert impact.over_budget is False
    assert impact.message == "Order created"


def test_scenario_b_near_threshold():
    impact = evaluate_budget(_figures("1000", "700"), Decimal("150"))

    assert impact.percent_after == Decimal("85")
    assert impact.near_threshold is True
    assert impact.over_budget is False
    assert "approaching budget limit" in impact.message


def test_scenario_c_over_budget():
    impact = evaluate_budget(_figures("1000", "950"), Decimal("100"))

    assert impact.percent_after == Decimal("105")
    assert impact.near_threshold is False
    assert impact.over_budget is True
    assert "flagged for approval" in impact.message


def test_scenario_d_no_budget_row():
    impact = evaluate_budget(None, Decimal("9999"))

    assert impact.percent_after == 0
    assert impact.near_threshold is False
    assert impact.over_budget is False


@pytest.mark.parametrize("total", ["0", "-10"])
def test_non_positive_total_budget_means_no_budget(total):
    impact = evaluate_budget(_figures(total, "500"), Decimal("100"))

    assert impact.percent_after == 0
    assert not impact.near_threshold
    assert not impact.over_budget


@pytest.mark.parametrize(
    "committed, estimate, near, over",
    [
        ("799.99", "0", False, False),
        ("800", "0", True, False),
        ("0", "999.99", True, False),
        ("0", "1000", False, True),
        ("1000", "0.01", False, True),
    ],
)
def test_threshold_boundaries(committed, estimate, near, over):
    impact = evaluate_budget(_figures("1000", committed), Decimal(estimate))

    assert impact.near_threshold is near
    assert impact.over_budget is over


def test_percent_formula():
    impact = evaluate_budget(_figures("3000", "250"), Decimal("750"))

    assert impact.percent_after == (Decimal("250") + Decimal("750")) / Decimal("3000") * 100
