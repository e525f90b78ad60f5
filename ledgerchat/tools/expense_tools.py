"""Expense query tools and the create_expense proposal tool.

All tools are pure functions of their arguments and the request's
context snapshot. ``create_expense`` only validates and returns a
proposal; applying it is the caller's job.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING

from pydantic import Field

from ledgerchat.budget import budget_status
from ledgerchat.tools.base import ToolParams, ToolResult
from ledgerchat.tools.periods import (
    Period,
    ReportPeriod,
    days_in_month,
    filter_by_range,
    parse_day,
    resolve_period,
)
from ledgerchat.tools.registry import registry

if TYPE_CHECKING:
    from ledgerchat.models import ContextData, ExpenseSummary

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All categories"
TOTAL_BUDGET = "Total"
DEFAULT_SEARCH_LIMIT = 10
DEFAULT_TOP_LIMIT = 5

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def _money(value: float) -> str:
    return f"{value:.2f}"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _expense_row(expense: ExpenseSummary) -> dict:
    return {
        "date": expense.date,
        "description": expense.description,
        "amount": _money(expense.amount),
        "category": expense.category_name,
    }


def _period_expenses(context: ContextData, period: str) -> list[ExpenseSummary]:
    today = parse_day(context.today)
    if today is None:
        logger.warning("Context has invalid today=%r, treating period as all_time", context.today)
        return list(context.expenses)
    return filter_by_range(context.expenses, resolve_period(period, today))


# -- Param models --------------------------------------------------------------


class SpendingSummaryParams(ToolParams):
    period: Period = Field(description="Period to analyze")
    category_id: str | None = Field(
        default=None,
        description="Optional category ID to filter by",
    )


class BudgetStatusParams(ToolParams):
    category_id: str | None = Field(
        default=None,
        description="Category ID (null or omitted for the total budget)",
    )


class SearchExpensesParams(ToolParams):
    query: str | None = Field(default=None, description="Text to search for in descriptions")
    category_id: str | None = Field(default=None, description="Filter by category")
    min_amount: float | None = Field(default=None, description="Minimum amount")
    max_amount: float | None = Field(default=None, description="Maximum amount")
    limit: int | None = Field(
        default=None,
        ge=0,
        description=f"Maximum number of results (default: {DEFAULT_SEARCH_LIMIT})",
    )


class TopExpensesParams(ToolParams):
    period: ReportPeriod = Field(description="Period to analyze")
    limit: int | None = Field(
        default=None,
        ge=0,
        description=f"Number of expenses to return (default: {DEFAULT_TOP_LIMIT})",
    )


class CategoryBreakdownParams(ToolParams):
    period: ReportPeriod = Field(description="Period to analyze")


class CreateExpenseParams(ToolParams):
    amount: float = Field(description="Expense amount (positive number)")
    description: str = Field(description="Expense description")
    category_id: str = Field(description="Category ID")
    date: str = Field(description="Date in YYYY-MM-DD format")


# -- Tools ---------------------------------------------------------------------


@registry.tool(
    name="get_spending_summary",
    description=(
        "Get the total amount spent over a period, optionally filtered "
        "by category."
    ),
    params_model=SpendingSummaryParams,
)
def get_spending_summary(
    context: ContextData, period: str, category_id: str | None = None
) -> ToolResult:
    expenses = _period_expenses(context, period)
    if category_id:
        expenses = [e for e in expenses if e.category_id == category_id]

    total = sum(e.amount for e in expenses)
    return ToolResult(data={
        "period": period,
        "category": context.category_name(category_id) or ALL_CATEGORIES,
        "total": _money(total),
        "currency": context.settings.currency,
        "transactionCount": len(expenses),
    })


@registry.tool(
    name="get_budget_status",
    description="Check the budget status for a specific category or the total budget.",
    params_model=BudgetStatusParams,
)
def get_budget_status(context: ContextData, category_id: str | None = None) -> ToolResult:
    wanted = category_id or None
    budget = next((b for b in context.budgets if b.category_id == wanted), None)

    if budget is None:
        name = TOTAL_BUDGET if wanted is None else (context.category_name(wanted) or wanted)
        return ToolResult(data={
            "message": f"No budget configured for {name}",
            "hasBudget": False,
        })

    status = budget_status(budget.spent, budget.amount)
    data = {
        "category": budget.category_name or TOTAL_BUDGET,
        "budgetAmount": budget.amount,
        "spent": _money(budget.spent),
        "remaining": _money(budget.amount - budget.spent),
        "percentage": status.percentage,
        "status": status.status,
        "period": budget.period,
        "currency": context.settings.currency,
        "hasBudget": True,
    }

    today = parse_day(context.today)
    if budget.period == "monthly" and today is not None:
        data["daysRemaining"] = days_in_month(today) - today.day

    return ToolResult(data=data)


@registry.tool(
    name="search_expenses",
    description="Search expenses by description text or criteria.",
    params_model=SearchExpensesParams,
)
def search_expenses(
    context: ContextData,
    query: str | None = None,
    category_id: str | None = None,
    min_amount: float | None = None,
    max_amount: float | None = None,
    limit: int | None = None,
) -> ToolResult:
    expenses = list(context.expenses)

    if query:
        needle = query.lower()
        expenses = [e for e in expenses if needle in e.description.lower()]
    if category_id:
        expenses = [e for e in expenses if e.category_id == category_id]
    if min_amount is not None:
        expenses = [e for e in expenses if e.amount >= min_amount]
    if max_amount is not None:
        expenses = [e for e in expenses if e.amount <= max_amount]

    expenses = expenses[: limit or DEFAULT_SEARCH_LIMIT]

    return ToolResult(data={
        "expenses": [_expense_row(e) for e in expenses],
        "count": len(expenses),
        "currency": context.settings.currency,
    })


@registry.tool(
    name="get_top_expenses",
    description="Get the largest expenses over a period.",
    params_model=TopExpensesParams,
)
def get_top_expenses(context: ContextData, period: str, limit: int | None = None) -> ToolResult:
    expenses = sorted(_period_expenses(context, period), key=lambda e: e.amount, reverse=True)
    expenses = expenses[: limit or DEFAULT_TOP_LIMIT]

    return ToolResult(data={
        "period": period,
        "expenses": [_expense_row(e) for e in expenses],
        "currency": context.settings.currency,
    })


@registry.tool(
    name="get_category_breakdown",
    description="Get the split of spending across categories for a period.",
    params_model=CategoryBreakdownParams,
)
def get_category_breakdown(context: ContextData, period: str) -> ToolResult:
    expenses = _period_expenses(context, period)

    # dicts keep insertion order, so ties below stay in discovery order
    groups: dict[str, dict] = {}
    for expense in expenses:
        group = groups.setdefault(
            expense.category_id,
            {"name": expense.category_name, "total": 0.0, "count": 0},
        )
        group["total"] += expense.amount
        group["count"] += 1

    total = sum(e.amount for e in expenses)
    ranked = sorted(groups.values(), key=lambda g: g["total"], reverse=True)

    return ToolResult(data={
        "period": period,
        "total": _money(total),
        "categories": [
            {
                "name": g["name"],
                "total": _money(g["total"]),
                "count": g["count"],
                "percentage": _round_half_up(g["total"] / total * 100) if total > 0 else 0,
            }
            for g in ranked
        ],
        "currency": context.settings.currency,
    })


@registry.tool(
    name="create_expense",
    description=(
        "Create a new expense. IMPORTANT: only call this after the user has "
        "explicitly confirmed the amount, category and date."
    ),
    params_model=CreateExpenseParams,
    mutating=True,
)
def create_expense(
    context: ContextData,
    amount: float,
    description: str,
    category_id: str,
    date: str,
) -> ToolResult:
    if not math.isfinite(amount) or amount <= 0:
        return ToolResult(error="Amount must be positive")

    description = description.strip()
    if not description:
        return ToolResult(error="Description is required")

    category_name = context.category_name(category_id)
    if category_name is None:
        return ToolResult(error=f"Category not found: {category_id}")

    if not _DATE_RE.fullmatch(date) or parse_day(date) is None:
        return ToolResult(error="Invalid date format. Use YYYY-MM-DD")

    return ToolResult(data={
        "success": True,
        "expense": {
            "amount": amount,
            "description": description,
            "categoryId": category_id,
            "categoryName": category_name,
            "date": date,
        },
    })
