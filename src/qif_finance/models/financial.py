"""Data models for accounts, transactions and the financial document."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from ..utils.exceptions import ValidationError


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class AccountType(Enum):
    """Kind of financial account."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    INVESTMENT = "investment"
    CASH = "cash"
    LIABILITY = "liability"
    ASSET = "asset"


class TransactionType(Enum):
    """Kind of transaction. Direction of money lives here, not in the amount sign."""

    DEBIT = "debit"  # Money out
    CREDIT = "credit"  # Money in
    TRANSFER = "transfer"
    FEE = "fee"
    INTEREST = "interest"
    DIVIDEND = "dividend"


@dataclass(frozen=True)
class OtherKind:
    """
    Fallback kind for values outside the known account/transaction types.

    Keeps the original text so unknown values survive in memory.
    """

    label: str

    @property
    def value(self) -> str:
        return f"other({self.label})"


AccountKind = Union[AccountType, OtherKind]
TransactionKind = Union[TransactionType, OtherKind]


@dataclass
class Account:
    """A financial account (checking, savings, credit card, ...)."""

    name: str
    account_type: AccountKind
    balance: Decimal = Decimal("0")
    currency: str = "USD"
    institution: Optional[str] = None
    account_number: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.updated_at is None:
            self.updated_at = self.created_at

    def update_balance(self, new_balance: Decimal) -> None:
        """Set the balance and stamp the modification time."""
        self.balance = new_balance
        self.updated_at = utc_now()


@dataclass
class Transaction:
    """
    A single financial transaction.

    ``amount`` is always non-negative; ``transaction_type`` carries the
    direction. A reconciled transaction is always cleared.
    """

    account_id: UUID
    date: datetime
    amount: Decimal
    description: str
    transaction_type: TransactionKind
    category: Optional[str] = None
    payee: Optional[str] = None
    memo: Optional[str] = None
    cleared: bool = False
    reconciled: bool = False
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValidationError(
                f"Transaction amount must be non-negative, got {self.amount}"
            )
        # -0.00 passes the check above; store it unsigned
        self.amount = self.amount.copy_abs()
        if self.reconciled:
            self.cleared = True
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def is_debit(self) -> bool:
        return self.transaction_type is TransactionType.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.transaction_type is TransactionType.CREDIT

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the debit sign reapplied."""
        if self.is_debit:
            return self.amount.copy_negate()
        return self.amount

    def mark_cleared(self) -> None:
        """Mark transaction as cleared."""
        self.cleared = True
        self.updated_at = utc_now()

    def mark_reconciled(self) -> None:
        """Mark transaction as reconciled (which also clears it)."""
        self.reconciled = True
        self.cleared = True
        self.updated_at = utc_now()


@dataclass
class FinancialData:
    """
    Container for accounts and transactions parsed from one document.

    ``categories`` and ``payees`` are indices of the distinct labels seen on
    added transactions, in first-appearance order. They are maintained by
    ``add_transaction`` and should not be edited directly.
    """

    accounts: list[Account] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    payees: list[str] = field(default_factory=list)

    def add_account(self, account: Account) -> None:
        """
        Add an account.

        Raises:
            ValidationError: If an account with the same id already exists
        """
        if self.get_account(account.id) is not None:
            raise ValidationError(f"Duplicate account id: {account.id}")
        self.accounts.append(account)

    def add_transaction(self, transaction: Transaction) -> None:
        """Add a transaction and record its category and payee labels."""
        if transaction.category is not None and transaction.category not in self.categories:
            self.categories.append(transaction.category)

        if transaction.payee is not None and transaction.payee not in self.payees:
            self.payees.append(transaction.payee)

        self.transactions.append(transaction)

    def get_account(self, account_id: UUID) -> Optional[Account]:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None

    def get_account_transactions(self, account_id: UUID) -> list[Transaction]:
        """Transactions owned by an account, in document order."""
        return [t for t in self.transactions if t.account_id == account_id]

    def calculate_account_balance(self, account_id: UUID) -> Decimal:
        """
        Calculate an account balance from its transactions.

        Debits subtract; credits and every other kind add.
        """
        return sum(
            (t.signed_amount for t in self.get_account_transactions(account_id)),
            Decimal("0"),
        )
