"""
Excel report generator for financial analysis results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.financial import FinancialData, Transaction
from ..models.reports import (
    CategoryAnalysis,
    MonthlyReport,
    SpendingTrend,
    TrendDirection,
)
from ..config import FinanceConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
INCREASING_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
DECREASING_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
ANOMALY_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


class ExcelReportGenerator:
    """Generates Excel analysis reports with multiple sheets."""

    def __init__(self, config: FinanceConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(
        self,
        data: FinancialData,
        output_path: Path,
        monthly_report: Optional[MonthlyReport] = None,
        categories: Optional[list[CategoryAnalysis]] = None,
        trends: Optional[list[SpendingTrend]] = None,
        anomalies: Optional[list[Transaction]] = None,
        source_name: str = "",
    ) -> Path:
        """
        Generate the complete analysis report.

        Sheets whose report is None are left out.

        Args:
            data: Parsed financial data
            output_path: Path for output file
            monthly_report: Report for a single month
            categories: Category ranking
            trends: Spending trends
            anomalies: Anomalous transactions
            source_name: Name of the QIF file the data came from

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be saved
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config

        if sheets.summary.enabled:
            self._create_summary_sheet(wb, data, source_name)

        if sheets.monthly.enabled and monthly_report is not None:
            self._create_monthly_sheet(wb, monthly_report)

        if sheets.categories.enabled and categories is not None:
            self._create_categories_sheet(wb, categories)

        if sheets.trends.enabled and trends is not None:
            self._create_trends_sheet(wb, trends)

        if sheets.anomalies.enabled and anomalies is not None:
            self._create_anomalies_sheet(wb, data, anomalies)

        if sheets.transactions.enabled:
            self._create_transactions_sheet(wb, data)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, data: FinancialData, source_name: str
    ) -> None:
        """Create the summary sheet with accounts and totals."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Financial Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        info = [
            ("Source File:", source_name or "-"),
            ("Generated At:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Accounts:", len(data.accounts)),
            ("Transactions:", len(data.transactions)),
            ("Categories:", len(data.categories)),
            ("Payees:", len(data.payees)),
        ]

        for i, (label, value) in enumerate(info, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        row = len(info) + 4
        ws[f"A{row}"] = "Accounts"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        self._write_headers(
            ws, row, ["Name", "Type", "Institution", "Transactions", "Balance"]
        )

        for account in data.accounts:
            row += 1
            row_data = [
                account.name,
                account.account_type.value,
                account.institution or "",
                len(data.get_account_transactions(account.id)),
                float(data.calculate_account_balance(account.id)),
            ]
            self._write_row(ws, row, row_data)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 30

    def _create_monthly_sheet(self, wb: Workbook, report: MonthlyReport) -> None:
        """Create the single-month income/expense sheet."""
        ws = wb.create_sheet(self.sheet_config.monthly.name)

        ws["A1"] = f"Monthly Report: {report.period_label}"
        ws["A1"].font = Font(size=14, bold=True)

        totals = [
            ("Total Income:", float(report.total_income)),
            ("Total Expenses:", float(report.total_expenses)),
            ("Net Income:", float(report.net_income)),
            ("Transactions:", report.transaction_count),
        ]
        for i, (label, value) in enumerate(totals, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        row = len(totals) + 4
        self._write_headers(ws, row, ["Category", "Amount"])
        for category, amount in sorted(report.category_breakdown.items()):
            row += 1
            self._write_row(ws, row, [category, float(amount)])

        self._auto_fit_columns(ws)

    def _create_categories_sheet(
        self, wb: Workbook, categories: list[CategoryAnalysis]
    ) -> None:
        """Create the category ranking sheet."""
        ws = wb.create_sheet(self.sheet_config.categories.name)

        self._write_headers(
            ws, 1, ["Category", "Total", "Transactions", "Average", "% of Total"]
        )

        for row_num, analysis in enumerate(categories, start=2):
            row_data = [
                analysis.category,
                float(analysis.total_amount),
                analysis.transaction_count,
                float(analysis.average_amount),
                f"{analysis.percentage_of_total:.2f}%",
            ]
            self._write_row(ws, row_num, row_data)

        self._auto_fit_columns(ws)

    def _create_trends_sheet(self, wb: Workbook, trends: list[SpendingTrend]) -> None:
        """Create the spending trends sheet, one row per category."""
        ws = wb.create_sheet(self.sheet_config.trends.name)

        month_labels = [label for label, _ in trends[0].monthly_amounts] if trends else []
        self._write_headers(
            ws, 1, ["Category", *month_labels, "Average", "Trend"]
        )

        for row_num, trend in enumerate(trends, start=2):
            row_data = [
                trend.category,
                *(float(amount) for _, amount in trend.monthly_amounts),
                float(trend.average_monthly),
                trend.trend_direction.value,
            ]
            fill = None
            if trend.trend_direction is TrendDirection.INCREASING:
                fill = INCREASING_FILL
            elif trend.trend_direction is TrendDirection.DECREASING:
                fill = DECREASING_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_anomalies_sheet(
        self, wb: Workbook, data: FinancialData, anomalies: list[Transaction]
    ) -> None:
        """Create the anomalous transactions sheet."""
        ws = wb.create_sheet(self.sheet_config.anomalies.name)

        self._write_headers(
            ws, 1, ["Date", "Account", "Payee", "Category", "Amount", "Description"]
        )

        for row_num, txn in enumerate(anomalies, start=2):
            account = data.get_account(txn.account_id)
            row_data = [
                txn.date.date(),
                account.name if account else "",
                txn.payee or "",
                txn.category or self.config.analysis.uncategorized_label,
                float(txn.amount),
                txn.description,
            ]
            self._write_row(ws, row_num, row_data, ANOMALY_FILL)

        self._auto_fit_columns(ws)

    def _create_transactions_sheet(self, wb: Workbook, data: FinancialData) -> None:
        """Create the full transaction listing."""
        ws = wb.create_sheet(self.sheet_config.transactions.name)

        self._write_headers(
            ws,
            1,
            [
                "Date",
                "Account",
                "Type",
                "Amount",
                "Payee",
                "Category",
                "Memo",
                "Cleared",
                "Reconciled",
            ],
        )

        account_names = {a.id: a.name for a in data.accounts}
        for row_num, txn in enumerate(data.transactions, start=2):
            row_data = [
                txn.date.date(),
                account_names.get(txn.account_id, ""),
                txn.transaction_type.value,
                float(txn.signed_amount),
                txn.payee or "",
                txn.category or "",
                txn.memo or "",
                "Y" if txn.cleared else "",
                "Y" if txn.reconciled else "",
            ]
            self._write_row(ws, row_num, row_data)

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, row: int, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(
        self,
        ws: Worksheet,
        row: int,
        values: list,
        fill: Optional[PatternFill] = None,
    ) -> None:
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=col, value=value)
            # QIF text such as "=Refund" is data, not a formula
            if isinstance(value, str) and value.startswith("="):
                cell.data_type = "s"
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
