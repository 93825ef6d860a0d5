"""Data models for accounts, transactions and reports."""

from .financial import (
    Account,
    AccountKind,
    AccountType,
    FinancialData,
    OtherKind,
    Transaction,
    TransactionKind,
    TransactionType,
)
from .reports import (
    CategoryAnalysis,
    MonthlyReport,
    SpendingTrend,
    TrendDirection,
)

__all__ = [
    "Account",
    "AccountKind",
    "AccountType",
    "FinancialData",
    "OtherKind",
    "Transaction",
    "TransactionKind",
    "TransactionType",
    "CategoryAnalysis",
    "MonthlyReport",
    "SpendingTrend",
    "TrendDirection",
]
