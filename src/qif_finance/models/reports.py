"""Result models returned by the analysis engine."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class TrendDirection(Enum):
    """Direction of a spending trend."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass
class MonthlyReport:
    """Income, expenses and category totals for one calendar month."""

    year: int
    month: int
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    category_breakdown: dict[str, Decimal] = field(default_factory=dict)
    transaction_count: int = 0

    @property
    def period_label(self) -> str:
        return f"{self.year}-{self.month:02d}"


@dataclass
class CategoryAnalysis:
    """Spending totals for one category, restricted to debits."""

    category: str
    total_amount: Decimal
    transaction_count: int
    average_amount: Decimal
    percentage_of_total: Decimal


@dataclass
class SpendingTrend:
    """Monthly debit totals for one category over a lookback window."""

    category: str
    # (YYYY-MM label, amount), oldest month first
    monthly_amounts: list[tuple[str, Decimal]]
    trend_direction: TrendDirection
    average_monthly: Decimal
