"""Shared test fixtures."""

from typing import Any

import pytest

from ledgerchat.config import Settings
from ledgerchat.models import ContextData

TODAY = "2024-03-15"  # a Friday; its ISO week runs 2024-03-11..2024-03-17


def make_context(**overrides: Any) -> ContextData:
    """Build a ContextData from camelCase wire data with sensible defaults."""
    data: dict[str, Any] = {
        "expenses": [],
        "categories": [
            {"id": "1", "name": "Food"},
            {"id": "2", "name": "Transport"},
            {"id": "3", "name": "Leisure"},
        ],
        "budgets": [],
        "settings": {"currency": "EUR", "locale": "fr-FR"},
        "stats": {
            "monthlyTotal": 0,
            "weeklyTotal": 0,
            "todayTotal": 0,
            "transactionCount": 0,
            "topCategory": None,
        },
        "today": TODAY,
    }
    data.update(overrides)
    return ContextData.model_validate(data)


def expense(
    id: str,
    amount: float,
    date: str,
    category_id: str = "1",
    description: str | None = None,
) -> dict[str, Any]:
    names = {"1": "Food", "2": "Transport", "3": "Leisure"}
    return {
        "id": id,
        "amount": amount,
        "description": description or f"expense {id}",
        "categoryId": category_id,
        "categoryName": names.get(category_id, "Other"),
        "date": date,
    }


@pytest.fixture
def context() -> ContextData:
    return make_context()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the production defaults and a short timeout."""
    return Settings(request_timeout=5.0)
