"""Tests for budget status computation."""

import pytest

from ledgerchat.budget import budget_status


@pytest.mark.parametrize(
    ("spent", "amount", "percentage", "status"),
    [
        (0, 100, 0, "safe"),
        (74.99, 100, 74.99, "safe"),
        (75, 100, 75, "warning"),
        (90, 100, 90, "danger"),
        (250, 100, 100, "danger"),
        (50, 0, 0, "safe"),
        (50, -10, 0, "safe"),
    ],
)
def test_budget_status(spent, amount, percentage, status) -> None:
    result = budget_status(spent, amount)
    assert result.percentage == pytest.approx(percentage)
    assert result.status == status


def test_percentage_matches_ratio() -> None:
    for spent, amount in [(1, 3), (2, 7), (33.3, 100), (99, 98)]:
        expected = min(spent / amount, 1) * 100
        assert budget_status(spent, amount).percentage == pytest.approx(expected)
