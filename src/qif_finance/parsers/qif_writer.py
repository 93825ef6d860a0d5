"""
QIF writer.
Serializes a FinancialData document back into QIF text.
"""

from pathlib import Path
import logging

from ..models.financial import (
    Account,
    AccountKind,
    AccountType,
    FinancialData,
    Transaction,
)
from ..config import FinanceConfig
from ..utils.exceptions import QIFExportError, QIFFileError

logger = logging.getLogger(__name__)

EXPORT_DATE_FORMAT = "%m/%d/%Y"

# OtherKind and anything unmapped export as DEFAULT_QIF_TYPE
QIF_ACCOUNT_TYPES = {
    AccountType.CHECKING: "Bank",
    AccountType.SAVINGS: "Bank",
    AccountType.CREDIT_CARD: "CCard",
    AccountType.INVESTMENT: "Invst",
    AccountType.CASH: "Cash",
    AccountType.LIABILITY: "Liability",
    AccountType.ASSET: "Asset",
}
DEFAULT_QIF_TYPE = "Bank"


class QIFWriter:
    """
    Writer for QIF files.

    Output depends only on the document's field values: accounts and
    transactions are written in stored order, with no timestamps added.
    """

    def __init__(self, config: FinanceConfig):
        """
        Initialize the writer with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config

    def export_to_string(self, data: FinancialData) -> str:
        """
        Serialize financial data to QIF text.

        Args:
            data: Document to serialize

        Returns:
            QIF document text

        Raises:
            QIFExportError: If a value cannot be serialized
        """
        parts: list[str] = []

        try:
            for account in data.accounts:
                parts.append(self._export_account(account))
                parts.append("\n")

                transactions = data.get_account_transactions(account.id)
                if transactions:
                    parts.append(self._export_transactions(transactions, account))
                    parts.append("\n")
        except (AttributeError, TypeError, ValueError) as e:
            raise QIFExportError(f"Failed to export financial data: {e}") from e

        return "".join(parts)

    def export_file(self, data: FinancialData, file_path: Path) -> Path:
        """
        Write financial data to a QIF file.

        Args:
            data: Document to serialize
            file_path: Destination path

        Returns:
            Path to the written file

        Raises:
            QIFFileError: If the file cannot be written
        """
        content = self.export_to_string(data)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding=self.config.output.qif.encoding) as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to write QIF file {file_path}: {e}")
            raise QIFFileError(f"Failed to write QIF file {file_path}: {e}") from e

        logger.info(
            f"Exported {len(data.accounts)} accounts and {len(data.transactions)} "
            f"transactions to {file_path}"
        )
        return file_path

    def _export_account(self, account: Account) -> str:
        lines = [
            "!Account",
            f"N{account.name}",
            f"T{self.account_type_to_qif(account.account_type)}",
        ]
        if account.institution is not None:
            lines.append(f"D{account.institution}")
        lines.append("^")

        return "\n".join(lines) + "\n"

    def _export_transactions(
        self, transactions: list[Transaction], account: Account
    ) -> str:
        output = f"!Type:{self.account_type_to_qif(account.account_type)}\n"
        for transaction in transactions:
            output += self._export_transaction(transaction)
        return output

    def _export_transaction(self, transaction: Transaction) -> str:
        lines = [
            f"D{transaction.date.strftime(EXPORT_DATE_FORMAT)}",
            # Fixed-point, debits negative (also for zero)
            f"T{transaction.signed_amount:f}",
        ]

        if transaction.payee is not None:
            lines.append(f"P{transaction.payee}")
        if transaction.category is not None:
            lines.append(f"L{transaction.category}")
        if transaction.memo is not None:
            lines.append(f"M{transaction.memo}")
        if transaction.cleared:
            lines.append("C*")

        lines.append("^")
        return "\n".join(lines) + "\n"

    @staticmethod
    def account_type_to_qif(account_type: AccountKind) -> str:
        """Map an account kind to its QIF type header."""
        if isinstance(account_type, AccountType):
            return QIF_ACCOUNT_TYPES[account_type]
        return DEFAULT_QIF_TYPE
