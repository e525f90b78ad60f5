"""System prompt assembly from the request's context snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ledgerchat.models import ContextData

DEFAULT_RECENT_LIMIT = 20

_INSTRUCTIONS = """\
## Instructions

1. **Language**: Always answer in the language the user writes in.

2. **Spending questions**: Use the available tools to get exact figures. \
Never guess or invent amounts.

3. **Budget advice**: Base your advice on the real data. Be constructive \
and encouraging.

4. **Adding expenses**: When the user wants to add an expense:
   - Extract the amount, description and date
   - Pick the most likely category from the list above
   - ALWAYS ask for confirmation BEFORE creating the expense
   - Use the format: "I'll add: [amount] | [category] | [date]. Confirm?"
   - Only call create_expense AFTER an explicit confirmation ("yes", "ok", \
"confirm", ...)

5. **Dates**: Resolve relative dates ("yesterday", "last Monday") against \
today's date ({today}). Always pass dates as YYYY-MM-DD.

6. **Conciseness**: Be concise and direct. Avoid long answers.

7. **Errors**: If you cannot answer, explain why clearly."""


def _format_categories(context: ContextData) -> str:
    if not context.categories:
        return "No categories defined"
    return "\n".join(f'- {c.name} (id: "{c.id}")' for c in context.categories)


def _format_budgets(context: ContextData) -> str:
    if not context.budgets:
        return "No budgets configured"

    currency = context.settings.currency
    lines = []
    for b in context.budgets:
        name = b.category_name or "Total"
        lines.append(
            f"- {name}: {b.spent:.2f}/{b.amount:.2f} {currency} "
            f"({b.percentage:.0f}% - {b.status}, {b.period})"
        )
    return "\n".join(lines)


def _format_expenses(context: ContextData, limit: int) -> str:
    if not context.expenses:
        return "No expenses recorded"

    currency = context.settings.currency
    return "\n".join(
        f"- {e.date}: {e.description} - {e.amount:.2f} {currency} ({e.category_name})"
        for e in context.expenses[:limit]
    )


def _format_stats(context: ContextData) -> str:
    stats = context.stats
    currency = context.settings.currency
    lines = [
        f"- Spent this month: {stats.monthly_total:.2f} {currency}",
        f"- Spent this week: {stats.weekly_total:.2f} {currency}",
        f"- Spent today: {stats.today_total:.2f} {currency}",
        f"- Transactions this month: {stats.transaction_count}",
    ]
    if stats.top_category is not None:
        top = stats.top_category
        lines.append(f"- Top category: {top.name} ({top.amount:.2f} {currency})")
    return "\n".join(lines)


def build_system_prompt(context: ContextData, recent_limit: int = DEFAULT_RECENT_LIMIT) -> str:
    """Render the system prompt for one request.

    The output depends only on ``context`` and ``recent_limit``. Recent
    expenses are the first ``recent_limit`` entries in list order; the
    client sends them newest first.
    """
    sections = [
        "You are a smart financial assistant built into an expense tracking app. "
        "You help users understand their spending, manage their budgets and "
        "record new expenses.",
        "## User's Financial Context\n\n"
        f"**Currency:** {context.settings.currency}\n"
        f"**Today's date:** {context.today}",
        f"### Current Statistics\n{_format_stats(context)}",
        f"### Available Categories\n{_format_categories(context)}",
        f"### Active Budgets\n{_format_budgets(context)}",
        f"### Recent Expenses (last {recent_limit})\n{_format_expenses(context, recent_limit)}",
        _INSTRUCTIONS.format(today=context.today),
    ]
    return "\n\n".join(sections)
