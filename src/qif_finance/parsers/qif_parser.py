"""
QIF (Quicken Interchange Format) parser.
Converts QIF text into accounts and transactions held in a FinancialData document.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional
from uuid import UUID
import logging

from ..models.financial import (
    Account,
    AccountKind,
    FinancialData,
    OtherKind,
    Transaction,
    TransactionType,
    utc_now,
)
from ..config import FinanceConfig
from ..utils.exceptions import QIFFileError, QIFParseError, QIFStructureError

logger = logging.getLogger(__name__)

ACCOUNT_HEADER = "!Account"
TYPE_HEADER = "!Type:"
RECORD_END = "^"

CLEARED_MARKERS = ("*", "x")


@dataclass
class SkippedRecord:
    """A transaction record dropped during parsing."""

    line_number: int
    reason: str


class LineCursor:
    """Pull-style cursor over the stripped lines of a QIF document."""

    def __init__(self, content: str):
        self.lines = [line.strip() for line in content.splitlines()]
        self.position = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.lines)

    @property
    def line_number(self) -> int:
        """1-based number of the current line."""
        return self.position + 1

    def peek(self) -> str:
        return self.lines[self.position]

    def advance(self) -> str:
        line = self.lines[self.position]
        self.position += 1
        return line

    def read_record(self) -> list[tuple[str, str]]:
        """
        Collect (tag, value) fields up to the end of the current record.

        A record ends at a lone ``^`` (consumed), at a ``!`` header line
        (left for the caller) or at end of input.
        """
        fields: list[tuple[str, str]] = []

        while not self.exhausted:
            line = self.peek()
            if line.startswith("!"):
                break

            self.advance()
            if line == RECORD_END:
                break
            if line:
                fields.append((line[0], line[1:]))

        return fields

    def skip_blank(self) -> None:
        while not self.exhausted and not self.peek():
            self.advance()


class QIFParser:
    """
    Parser for QIF files.

    Scans the document for ``!Account`` and ``!Type:`` sections, builds
    accounts and transactions, and skips transaction records whose date or
    amount cannot be parsed. Skipped records are listed in
    ``skipped_records`` after each parse.
    """

    def __init__(self, config: FinanceConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        input_config = config.input
        self.date_formats = list(input_config.date_formats)
        self.account_types = {
            alias.lower(): kind for alias, kind in input_config.account_types.items()
        }
        self.list_section_types = {t.lower() for t in input_config.list_section_types}
        self.default_currency = input_config.default_currency
        self.skipped_records: list[SkippedRecord] = []

    def parse_file(self, file_path: Path) -> FinancialData:
        """
        Parse a QIF file.

        Args:
            file_path: Path to the QIF file

        Returns:
            Parsed financial data

        Raises:
            QIFFileError: If the file cannot be read
            QIFParseError: If the content is structurally invalid
        """
        logger.info(f"Parsing QIF file: {file_path}")

        try:
            with open(file_path, "r", encoding=self.config.input.encoding) as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read QIF file {file_path}: {e}")
            raise QIFFileError(f"Failed to read QIF file {file_path}: {e}") from e

        return self.parse_content(content)

    def parse_content(self, content: str) -> FinancialData:
        """
        Parse QIF content from a string.

        Args:
            content: QIF document text

        Returns:
            Parsed financial data

        Raises:
            QIFParseError: If there is no content to parse
            QIFStructureError: If a transaction section has no owning account
        """
        if not content or not content.strip():
            raise QIFParseError("No QIF content to parse")

        self.skipped_records = []
        data = FinancialData()
        cursor = LineCursor(content)
        current_account: Optional[Account] = None

        while not cursor.exhausted:
            line = cursor.peek()

            if line.startswith(ACCOUNT_HEADER):
                cursor.advance()
                current_account = self._parse_account(cursor.read_record())
                data.add_account(current_account)
                logger.debug(f"Parsed account: {current_account.name}")

            elif line.startswith(TYPE_HEADER):
                section_type = line[len(TYPE_HEADER):].strip()
                cursor.advance()

                if section_type.lower() in self.list_section_types:
                    logger.debug(f"Skipping list section: {section_type}")
                    continue

                if current_account is None:
                    raise QIFStructureError(
                        f"Line {cursor.line_number - 1}: transaction section "
                        f"'{section_type}' appears before any account"
                    )

                for txn in self._parse_transaction_section(cursor, current_account.id):
                    data.add_transaction(txn)

            else:
                cursor.advance()

        logger.info(
            f"Parsed {len(data.accounts)} accounts and {len(data.transactions)} "
            f"transactions ({len(self.skipped_records)} records skipped)"
        )

        return data

    def _parse_account(self, fields: list[tuple[str, str]]) -> Account:
        name = "Unknown Account"
        account_type: AccountKind = OtherKind("Unknown")
        description: Optional[str] = None

        for tag, value in fields:
            if tag == "N":
                name = value
            elif tag == "T":
                account_type = self.parse_account_type(value)
            elif tag == "D":
                # QIF has no separate institution field
                description = value

        return Account(
            name=name,
            account_type=account_type,
            balance=Decimal("0"),
            currency=self.default_currency,
            institution=description,
        )

    def _parse_transaction_section(
        self, cursor: LineCursor, account_id: UUID
    ) -> list[Transaction]:
        """Read transaction records until the next header line or end of input."""
        transactions: list[Transaction] = []

        while True:
            cursor.skip_blank()
            if cursor.exhausted or cursor.peek().startswith("!"):
                break

            start_line = cursor.line_number
            fields = cursor.read_record()
            if not fields:
                continue

            try:
                transactions.append(self._build_transaction(fields, account_id))
            except QIFParseError as e:
                logger.warning(f"Skipping transaction record at line {start_line}: {e}")
                self.skipped_records.append(SkippedRecord(start_line, str(e)))

        return transactions

    def _build_transaction(
        self, fields: list[tuple[str, str]], account_id: UUID
    ) -> Transaction:
        """
        Build a transaction from collected fields.

        Raises:
            QIFParseError: If the date or amount is unparseable
        """
        date: Optional[datetime] = None
        amount = Decimal("0")
        description = "Unknown"
        payee: Optional[str] = None
        category: Optional[str] = None
        memo: Optional[str] = None
        cleared = False

        for tag, value in fields:
            if tag == "D":
                date = self.parse_date(value)
            elif tag == "T":
                amount = self.parse_amount(value)
            elif tag == "P":
                payee = value
                description = value
            elif tag == "L":
                category = value
            elif tag == "M":
                memo = value
                description = value
            elif tag == "C":
                cleared = value.strip().lower() in CLEARED_MARKERS

        transaction_type = TransactionType.DEBIT if amount < 0 else TransactionType.CREDIT

        return Transaction(
            account_id=account_id,
            date=date if date is not None else utc_now(),
            amount=amount.copy_abs(),
            description=description,
            transaction_type=transaction_type,
            category=category,
            payee=payee,
            memo=memo,
            cleared=cleared,
        )

    def parse_date(self, date_str: str) -> datetime:
        """
        Parse a QIF date (e.g. ``12/1/2023``, ``1/15'23``, ``2023-12-01``).

        Args:
            date_str: Date text from a ``D`` field

        Returns:
            Midnight UTC on that date

        Raises:
            QIFParseError: If no configured format matches
        """
        cleaned = date_str.strip().replace("'", "/").replace(" ", "")

        for date_format in self.date_formats:
            try:
                parsed = datetime.strptime(cleaned, date_format)
            except ValueError:
                continue
            return parsed.replace(tzinfo=timezone.utc)

        raise QIFParseError(f"Could not parse date: {date_str}")

    def parse_amount(self, amount_str: str) -> Decimal:
        """
        Parse a QIF amount as an exact decimal, keeping its sign.

        Raises:
            QIFParseError: If the text is not a finite number
        """
        cleaned = amount_str.strip().replace(",", "")

        try:
            amount = Decimal(cleaned)
        except InvalidOperation as e:
            raise QIFParseError(f"Failed to parse transaction amount: {amount_str}") from e

        if not amount.is_finite():
            raise QIFParseError(f"Failed to parse transaction amount: {amount_str}")

        return amount

    def parse_account_type(self, type_str: str) -> AccountKind:
        """Map a QIF account type to an AccountType, falling back to OtherKind."""
        cleaned = type_str.strip()
        return self.account_types.get(cleaned.lower(), OtherKind(cleaned))
