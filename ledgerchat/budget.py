"""Budget status thresholds."""

from dataclasses import dataclass
from typing import Literal

WARNING_THRESHOLD = 75
DANGER_THRESHOLD = 90

BudgetStatusType = Literal["safe", "warning", "danger"]


@dataclass(frozen=True)
class BudgetStatus:
    percentage: float
    status: BudgetStatusType


def budget_status(spent: float, amount: float) -> BudgetStatus:
    """Percentage of the budget used (capped at 100) and its severity level.

    A budget with a non-positive amount is always reported as 0% / safe.
    """
    if amount <= 0:
        return BudgetStatus(percentage=0, status="safe")

    percentage = min(spent / amount * 100, 100)

    if percentage >= DANGER_THRESHOLD:
        status: BudgetStatusType = "danger"
    elif percentage >= WARNING_THRESHOLD:
        status = "warning"
    else:
        status = "safe"

    return BudgetStatus(percentage=percentage, status=status)
