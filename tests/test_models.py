"""Tests for the account, transaction and document models."""

from decimal import Decimal
from uuid import uuid4

import pytest

from qif_finance.models.financial import (
    Account,
    AccountType,
    FinancialData,
    OtherKind,
    Transaction,
    TransactionType,
)
from qif_finance.utils.exceptions import ValidationError

from .conftest import utc


def make_transaction(account_id=None, amount="100.00", txn_type=TransactionType.DEBIT, **kwargs):
    return Transaction(
        account_id=account_id or uuid4(),
        date=utc(2024, 3, 1),
        amount=Decimal(amount),
        description="Test",
        transaction_type=txn_type,
        **kwargs,
    )


class TestAccount:
    """Tests for Account."""

    def test_account_creation(self):
        account = Account("Test Checking", AccountType.CHECKING, Decimal("1000.00"))

        assert account.name == "Test Checking"
        assert account.account_type == AccountType.CHECKING
        assert account.balance == Decimal("1000.00")
        assert account.currency == "USD"
        assert account.institution is None
        assert account.updated_at == account.created_at

    def test_update_balance_stamps_modification_time(self):
        account = Account("Savings", AccountType.SAVINGS)
        before = account.updated_at

        account.update_balance(Decimal("-25.50"))

        assert account.balance == Decimal("-25.50")
        assert account.updated_at >= before

    def test_other_kind_keeps_label(self):
        account = Account("Brokerage", OtherKind("Port"))

        assert account.account_type == OtherKind("Port")
        assert account.account_type.label == "Port"
        assert account.account_type.value == "other(Port)"

    def test_ids_are_unique(self):
        assert Account("A", AccountType.CASH).id != Account("B", AccountType.CASH).id


class TestTransaction:
    """Tests for Transaction state and invariants."""

    def test_transaction_creation(self):
        account_id = uuid4()
        txn = make_transaction(account_id, "50.00")

        assert txn.account_id == account_id
        assert txn.amount == Decimal("50.00")
        assert txn.transaction_type == TransactionType.DEBIT
        assert not txn.cleared
        assert not txn.reconciled

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            make_transaction(amount="-1.00")

    def test_state_changes(self):
        txn = make_transaction()

        txn.mark_cleared()
        assert txn.cleared
        assert not txn.reconciled

        txn.mark_reconciled()
        assert txn.cleared
        assert txn.reconciled

    def test_reconciling_uncleared_transaction_clears_it(self):
        txn = make_transaction()

        txn.mark_reconciled()

        assert txn.reconciled and txn.cleared

    def test_negative_zero_amount_is_stored_unsigned(self):
        txn = make_transaction(amount="-0.00", txn_type=TransactionType.CREDIT)

        assert not txn.amount.is_signed()
        assert not txn.signed_amount.is_signed()

    def test_reconciled_at_construction_implies_cleared(self):
        txn = make_transaction(reconciled=True)

        assert txn.cleared

    def test_signed_amount(self):
        assert make_transaction(amount="10", txn_type=TransactionType.DEBIT).signed_amount == Decimal("-10")
        assert make_transaction(amount="10", txn_type=TransactionType.CREDIT).signed_amount == Decimal("10")
        assert make_transaction(amount="10", txn_type=TransactionType.FEE).signed_amount == Decimal("10")

    def test_zero_debit_signed_amount_is_negative_zero(self):
        txn = make_transaction(amount="0.00", txn_type=TransactionType.DEBIT)

        assert txn.signed_amount.is_signed()


class TestFinancialData:
    """Tests for the FinancialData document."""

    def test_add_account_and_transaction(self):
        data = FinancialData()
        account = Account("Test Account", AccountType.CHECKING, Decimal("1000.00"))
        data.add_account(account)

        data.add_transaction(
            make_transaction(account.id, category="Groceries", payee="Store ABC")
        )

        assert len(data.accounts) == 1
        assert len(data.transactions) == 1
        assert data.categories == ["Groceries"]
        assert data.payees == ["Store ABC"]

    def test_duplicate_account_id_rejected(self):
        data = FinancialData()
        account = Account("Test", AccountType.CHECKING)
        data.add_account(account)

        with pytest.raises(ValidationError):
            data.add_account(account)

    def test_label_indices_match_transactions(self):
        data = FinancialData()
        account_id = uuid4()
        labels = [
            ("Groceries", "Store A"),
            ("Gas", None),
            ("Groceries", "Store B"),
            (None, "Store A"),
            ("Rent", "Landlord"),
        ]
        for category, payee in labels:
            data.add_transaction(make_transaction(account_id, category=category, payee=payee))

        expected_categories = list(
            dict.fromkeys(t.category for t in data.transactions if t.category is not None)
        )
        expected_payees = list(
            dict.fromkeys(t.payee for t in data.transactions if t.payee is not None)
        )
        assert data.categories == expected_categories == ["Groceries", "Gas", "Rent"]
        assert data.payees == expected_payees == ["Store A", "Store B", "Landlord"]

    def test_get_account(self):
        data = FinancialData()
        account = Account("Test", AccountType.CHECKING)
        data.add_account(account)

        assert data.get_account(account.id) is account
        assert data.get_account(uuid4()) is None

    def test_get_account_transactions_preserves_order(self):
        data = FinancialData()
        first, second = uuid4(), uuid4()
        t1 = make_transaction(first, memo="one")
        t2 = make_transaction(second)
        t3 = make_transaction(first, memo="three")
        for txn in (t1, t2, t3):
            data.add_transaction(txn)

        assert data.get_account_transactions(first) == [t1, t3]

    def test_account_balance_calculation(self):
        data = FinancialData()
        account_id = uuid4()
        data.add_transaction(make_transaction(account_id, "1000.00", TransactionType.CREDIT))
        data.add_transaction(make_transaction(account_id, "250.00", TransactionType.DEBIT))
        data.add_transaction(make_transaction(account_id, "5.00", TransactionType.INTEREST))

        assert data.calculate_account_balance(account_id) == Decimal("755.00")

    def test_balance_of_account_without_transactions_is_zero(self):
        assert FinancialData().calculate_account_balance(uuid4()) == Decimal("0")
