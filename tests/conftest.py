"""Shared fixtures for the QIF finance test suite."""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from qif_finance.analysis.engine import AnalysisEngine
from qif_finance.config import FinanceConfig, load_config
from qif_finance.models.financial import (
    Account,
    AccountType,
    FinancialData,
    Transaction,
    TransactionType,
)
from qif_finance.parsers.qif_parser import QIFParser
from qif_finance.parsers.qif_writer import QIFWriter


SAMPLE_QIF = """!Account
NChecking Account
TBank
^
!Type:Bank
D12/1/2023
T-50.00
PGrocery Store
LGroceries
MWeekly shopping
C*
^
D12/2/2023
T1000.00
PPaycheck
LSalary
MMonthly salary
^
"""


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


@pytest.fixture
def config() -> FinanceConfig:
    return load_config()


@pytest.fixture
def parser(config: FinanceConfig) -> QIFParser:
    return QIFParser(config)


@pytest.fixture
def writer(config: FinanceConfig) -> QIFWriter:
    return QIFWriter(config)


@pytest.fixture
def engine(config: FinanceConfig) -> AnalysisEngine:
    return AnalysisEngine(config)


@pytest.fixture
def sample_qif_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.qif"
    path.write_text(SAMPLE_QIF, encoding="utf-8")
    return path


@pytest.fixture
def analysis_data() -> FinancialData:
    """Two months of groceries and gas plus one salary credit."""
    data = FinancialData()
    account = Account("Test Account", AccountType.CHECKING, Decimal("1000.00"))
    data.add_account(account)

    rows = [
        (utc(2024, 1, 15), Decimal("500.00"), TransactionType.DEBIT, "Groceries"),
        (utc(2024, 1, 20), Decimal("200.00"), TransactionType.DEBIT, "Gas"),
        (utc(2024, 1, 25), Decimal("3000.00"), TransactionType.CREDIT, "Salary"),
        (utc(2024, 2, 10), Decimal("600.00"), TransactionType.DEBIT, "Groceries"),
        (utc(2024, 2, 15), Decimal("250.00"), TransactionType.DEBIT, "Gas"),
    ]
    for date, amount, txn_type, category in rows:
        data.add_transaction(
            Transaction(
                account_id=account.id,
                date=date,
                amount=amount,
                description="Test",
                transaction_type=txn_type,
                category=category,
            )
        )

    return data
