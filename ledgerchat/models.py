"""Wire models for the chat endpoint.

The client sends camelCase JSON. Models accept either the camelCase alias
or the snake_case attribute name, and dump back to camelCase.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for every model that crosses the HTTP boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- Context snapshot ----------------------------------------------------------


class ExpenseSummary(WireModel):
    id: str
    amount: float
    description: str
    category_id: str
    category_name: str
    date: str  # YYYY-MM-DD


class CategoryRef(WireModel):
    id: str
    name: str


class BudgetSummary(WireModel):
    category_id: str | None = None  # None = total budget
    category_name: str | None = None
    amount: float
    period: Literal["monthly", "weekly"]
    spent: float
    percentage: float
    status: Literal["safe", "warning", "danger"]


class UserSettings(WireModel):
    currency: str
    locale: str


class TopCategory(WireModel):
    id: str
    name: str
    amount: float


class PeriodStats(WireModel):
    monthly_total: float
    weekly_total: float
    today_total: float
    transaction_count: int
    top_category: TopCategory | None = None


class ContextData(WireModel):
    """Read-only snapshot of the user's data, rebuilt by the client per request."""

    expenses: list[ExpenseSummary] = Field(default_factory=list)
    categories: list[CategoryRef] = Field(default_factory=list)
    budgets: list[BudgetSummary] = Field(default_factory=list)
    settings: UserSettings
    stats: PeriodStats
    today: str  # YYYY-MM-DD

    def category_name(self, category_id: str | None) -> str | None:
        """Display name for a category id, or None if unknown."""
        if not category_id:
            return None
        for category in self.categories:
            if category.id == category_id:
                return category.name
        return None


# -- Conversation --------------------------------------------------------------


class ChatMessage(WireModel):
    id: str = ""
    role: Literal["user", "assistant"]
    content: str
    timestamp: str = ""
    is_loading: bool | None = None


class CreatedExpense(WireModel):
    """An expense the model asked to create. The caller decides whether to apply it."""

    amount: float
    description: str
    category_id: str
    category_name: str
    date: str


class ChatRequest(WireModel):
    message: str
    context: ContextData
    history: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(WireModel):
    response: str
    created_expense: CreatedExpense | None = None
