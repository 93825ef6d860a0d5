"""
Analysis engine producing monthly, category, trend and anomaly reports.

Every report is a read-only function of a FinancialData document. Money is
summed and divided as Decimal throughout; empty groups yield zero.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
import logging

from ..models.financial import FinancialData, Transaction
from ..models.reports import (
    CategoryAnalysis,
    MonthlyReport,
    SpendingTrend,
    TrendDirection,
)
from ..config import FinanceConfig
from ..utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _average(amounts: Sequence[Decimal]) -> Decimal:
    if not amounts:
        return ZERO
    return sum(amounts, ZERO) / Decimal(len(amounts))


def _recent_months(now: datetime, count: int) -> list[tuple[int, int]]:
    """The ``count`` calendar months ending with ``now``'s month, oldest first."""
    year, month = now.year, now.month
    months: list[tuple[int, int]] = []

    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12

    months.reverse()
    return months


class AnalysisEngine:
    """
    Financial analysis engine.

    Thresholds and the label for uncategorized spending come from
    ``config.analysis``.
    """

    def __init__(self, config: FinanceConfig):
        """
        Initialize the engine with configuration.

        Args:
            config: Application configuration
        """
        self.config = config
        analysis_config = config.analysis
        self.uncategorized_label = analysis_config.uncategorized_label
        self.anomaly_multiplier = analysis_config.anomaly_multiplier
        self.trend_threshold = analysis_config.trend_threshold

    def _category_of(self, transaction: Transaction) -> str:
        if transaction.category is None:
            return self.uncategorized_label
        return transaction.category

    def generate_monthly_report(
        self, data: FinancialData, year: int, month: int
    ) -> MonthlyReport:
        """
        Generate the income/expense report for one calendar month.

        Credits count as income and debits as expenses; other kinds count
        toward neither. The category breakdown sums every matched transaction
        that has a category, whatever its kind.

        Args:
            data: Financial data to analyze
            year: Target year
            month: Target month (1-12)

        Returns:
            Monthly report

        Raises:
            ValidationError: If month is out of range
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")

        month_transactions = [
            t for t in data.transactions if t.date.year == year and t.date.month == month
        ]

        total_income = ZERO
        total_expenses = ZERO
        category_breakdown: dict[str, Decimal] = {}

        for txn in month_transactions:
            if txn.is_credit:
                total_income += txn.amount
            elif txn.is_debit:
                total_expenses += txn.amount

            if txn.category is not None:
                category_breakdown[txn.category] = (
                    category_breakdown.get(txn.category, ZERO) + txn.amount
                )

        logger.debug(
            f"Monthly report {year}-{month:02d}: {len(month_transactions)} transactions"
        )

        return MonthlyReport(
            year=year,
            month=month,
            total_income=total_income,
            total_expenses=total_expenses,
            net_income=total_income - total_expenses,
            category_breakdown=category_breakdown,
            transaction_count=len(month_transactions),
        )

    def analyze_categories(self, data: FinancialData) -> list[CategoryAnalysis]:
        """
        Rank spending categories by total debit amount.

        Results are sorted by total descending, then by category name.
        """
        category_totals: dict[str, tuple[Decimal, int]] = {}
        total_spending = ZERO

        for txn in data.transactions:
            if not txn.is_debit:
                continue

            category = self._category_of(txn)
            current_amount, current_count = category_totals.get(category, (ZERO, 0))
            category_totals[category] = (current_amount + txn.amount, current_count + 1)
            total_spending += txn.amount

        results: list[CategoryAnalysis] = []
        for category, (total_amount, count) in category_totals.items():
            average_amount = total_amount / Decimal(count) if count > 0 else ZERO

            if total_spending == ZERO:
                percentage_of_total = ZERO
            else:
                percentage_of_total = (total_amount / total_spending) * HUNDRED

            results.append(
                CategoryAnalysis(
                    category=category,
                    total_amount=total_amount,
                    transaction_count=count,
                    average_amount=average_amount,
                    percentage_of_total=percentage_of_total,
                )
            )

        results.sort(key=lambda a: (-a.total_amount, a.category))
        return results

    def analyze_spending_trends(
        self,
        data: FinancialData,
        months_back: int,
        now: Optional[datetime] = None,
    ) -> list[SpendingTrend]:
        """
        Analyze monthly debit spending per category over a lookback window.

        Args:
            data: Financial data to analyze
            months_back: Number of calendar months, ending with the current one
            now: Anchor time (defaults to the current UTC time)

        Returns:
            One trend per category found on any transaction, sorted by category

        Raises:
            ValidationError: If months_back is negative
        """
        if months_back < 0:
            raise ValidationError(f"months_back must be non-negative, got {months_back}")

        if now is None:
            now = datetime.now(timezone.utc)

        months = _recent_months(now, months_back)
        categories = sorted({t.category for t in data.transactions if t.category is not None})

        # Debit totals keyed by (category, year, month)
        debit_totals: dict[tuple[str, int, int], Decimal] = {}
        for txn in data.transactions:
            if txn.is_debit and txn.category is not None:
                key = (txn.category, txn.date.year, txn.date.month)
                debit_totals[key] = debit_totals.get(key, ZERO) + txn.amount

        trends: list[SpendingTrend] = []
        for category in categories:
            monthly_amounts = [
                (f"{year}-{month:02d}", debit_totals.get((category, year, month), ZERO))
                for year, month in months
            ]
            amounts = [amount for _, amount in monthly_amounts]

            trends.append(
                SpendingTrend(
                    category=category,
                    monthly_amounts=monthly_amounts,
                    trend_direction=self.calculate_trend_direction(amounts),
                    average_monthly=_average(amounts),
                )
            )

        logger.debug(f"Computed {len(trends)} spending trends over {months_back} months")
        return trends

    def calculate_trend_direction(self, amounts: Sequence[Decimal]) -> TrendDirection:
        """
        Compare the average of the second half of a series with the first half.

        A change larger than ``trend_threshold`` times the first-half average
        is a trend; anything smaller is stable.
        """
        if len(amounts) < 2:
            return TrendDirection.STABLE

        midpoint = len(amounts) // 2
        first_half_avg = _average(amounts[:midpoint])
        second_half_avg = _average(amounts[midpoint:])

        difference = second_half_avg - first_half_avg
        threshold = first_half_avg * self.trend_threshold

        if difference > threshold:
            return TrendDirection.INCREASING
        if difference < -threshold:
            return TrendDirection.DECREASING
        return TrendDirection.STABLE

    def detect_anomalies(self, data: FinancialData) -> list[Transaction]:
        """
        Flag debits larger than ``anomaly_multiplier`` times their category mean.

        Returns:
            Anomalous transactions in document order
        """
        category_stats: dict[str, tuple[Decimal, int]] = {}

        for txn in data.transactions:
            if txn.is_debit:
                category = self._category_of(txn)
                total, count = category_stats.get(category, (ZERO, 0))
                category_stats[category] = (total + txn.amount, count + 1)

        anomalies: list[Transaction] = []
        for txn in data.transactions:
            if not txn.is_debit:
                continue

            total, count = category_stats[self._category_of(txn)]
            average = total / Decimal(count)
            if txn.amount > average * self.anomaly_multiplier:
                anomalies.append(txn)

        if anomalies:
            logger.info(f"Detected {len(anomalies)} anomalous transactions")

        return anomalies
