"""
Command-line interface for the QIF finance tool.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config, FinanceConfig
from .models.financial import FinancialData
from .parsers.qif_parser import QIFParser
from .parsers.qif_writer import QIFWriter
from .analysis.engine import AnalysisEngine
from .reports.excel_generator import ExcelReportGenerator
from .utils.exceptions import FinanceError
from .utils.logging_config import get_logger, setup_logging

console = Console()
logger = get_logger("cli")

config_option = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
qif_file_argument = click.argument("qif_file", type=click.Path(exists=True, path_type=Path))


@click.group()
@click.version_option(version=__version__)
def main():
    """QIF import/export and personal finance analysis tool."""
    pass


def _load(
    qif_file: Path, config: Optional[Path], verbose: bool
) -> tuple[FinanceConfig, QIFParser, FinancialData]:
    """Load configuration, set up logging and parse a QIF file."""
    finance_config = load_config(config)

    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName(finance_config.logging.level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    log_file = Path(finance_config.logging.file) if finance_config.logging.file else None
    setup_logging(log_level, log_file, finance_config.logging.format)

    parser = QIFParser(finance_config)
    data = parser.parse_file(qif_file)
    logger.debug(
        f"Loaded {len(data.accounts)} accounts and {len(data.transactions)} "
        f"transactions from {qif_file}"
    )
    return finance_config, parser, data


def _fail(error: Exception, verbose: bool) -> None:
    console.print(f"[red]Error: {error}[/red]")
    if verbose:
        console.print_exception()
    sys.exit(1)


def _money(amount: Decimal) -> str:
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"


@main.command()
@qif_file_argument
@config_option
@verbose_option
def parse(qif_file: Path, config: Optional[Path], verbose: bool):
    """
    Parse a QIF file and display a transaction summary.

    QIF_FILE: Path to the QIF file
    """
    try:
        _, parser, data = _load(qif_file, config, verbose)
    except FinanceError as e:
        _fail(e, verbose)
        return

    accounts = {a.id: a.name for a in data.accounts}

    table = Table(title=f"QIF Transactions: {qif_file.name}")
    table.add_column("Date")
    table.add_column("Account")
    table.add_column("Payee")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Cleared")

    for txn in data.transactions[:20]:  # Show first 20
        table.add_row(
            txn.date.strftime("%Y-%m-%d"),
            accounts.get(txn.account_id, "-"),
            txn.payee or "-",
            txn.category or "-",
            _money(txn.signed_amount),
            "*" if txn.cleared else "",
        )

    console.print(table)

    if len(data.transactions) > 20:
        console.print(f"\n... and {len(data.transactions) - 20} more transactions")

    console.print(f"\nAccounts: {len(data.accounts)}")
    console.print(f"Total transactions: {len(data.transactions)}")
    if parser.skipped_records:
        console.print(f"[yellow]Skipped records: {len(parser.skipped_records)}[/yellow]")


@main.command()
@qif_file_argument
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), required=True, help="Output QIF file path"
)
@config_option
@verbose_option
def export(qif_file: Path, output: Path, config: Optional[Path], verbose: bool):
    """
    Re-encode a QIF file in normalized form.

    QIF_FILE: Path to the QIF file
    """
    try:
        finance_config, _, data = _load(qif_file, config, verbose)
        QIFWriter(finance_config).export_file(data, output)
    except FinanceError as e:
        _fail(e, verbose)
        return

    console.print(f"[green]Exported {len(data.transactions)} transactions to {output}[/green]")


@main.command()
@qif_file_argument
@click.option("--year", type=int, required=True, help="Report year")
@click.option("--month", type=click.IntRange(1, 12), required=True, help="Report month (1-12)")
@config_option
@verbose_option
def monthly(qif_file: Path, year: int, month: int, config: Optional[Path], verbose: bool):
    """
    Show income, expenses and category totals for one month.

    QIF_FILE: Path to the QIF file
    """
    try:
        finance_config, _, data = _load(qif_file, config, verbose)
        report = AnalysisEngine(finance_config).generate_monthly_report(data, year, month)
    except FinanceError as e:
        _fail(e, verbose)
        return

    table = Table(title=f"Monthly Report: {report.period_label}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Income", _money(report.total_income))
    table.add_row("Total Expenses", _money(report.total_expenses))
    table.add_row("Net Income", _money(report.net_income))
    table.add_row("Transactions", str(report.transaction_count))
    console.print(table)

    if report.category_breakdown:
        breakdown = Table(title="By Category")
        breakdown.add_column("Category")
        breakdown.add_column("Amount", justify="right")
        for category, amount in sorted(report.category_breakdown.items()):
            breakdown.add_row(category, _money(amount))
        console.print(breakdown)


@main.command()
@qif_file_argument
@config_option
@verbose_option
def categories(qif_file: Path, config: Optional[Path], verbose: bool):
    """
    Rank spending categories by total debit amount.

    QIF_FILE: Path to the QIF file
    """
    try:
        finance_config, _, data = _load(qif_file, config, verbose)
        results = AnalysisEngine(finance_config).analyze_categories(data)
    except FinanceError as e:
        _fail(e, verbose)
        return

    table = Table(title="Spending by Category")
    table.add_column("Category", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Count", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("% of Total", justify="right")

    for analysis in results:
        table.add_row(
            analysis.category,
            _money(analysis.total_amount),
            str(analysis.transaction_count),
            _money(analysis.average_amount),
            f"{analysis.percentage_of_total:.1f}%",
        )

    console.print(table)


@main.command()
@qif_file_argument
@click.option("--months", type=click.IntRange(min=0), default=None, help="Lookback window in months")
@config_option
@verbose_option
def trends(qif_file: Path, months: Optional[int], config: Optional[Path], verbose: bool):
    """
    Show per-category spending trends over recent months.

    QIF_FILE: Path to the QIF file
    """
    try:
        finance_config, _, data = _load(qif_file, config, verbose)
        if months is None:
            months = finance_config.analysis.default_trend_months
        results = AnalysisEngine(finance_config).analyze_spending_trends(data, months)
    except FinanceError as e:
        _fail(e, verbose)
        return

    table = Table(title=f"Spending Trends ({months} months)")
    table.add_column("Category", style="cyan")
    table.add_column("Monthly Average", justify="right")
    table.add_column("Trend")

    for trend in results:
        table.add_row(
            trend.category,
            _money(trend.average_monthly),
            trend.trend_direction.value,
        )

    console.print(table)


@main.command()
@qif_file_argument
@config_option
@verbose_option
def anomalies(qif_file: Path, config: Optional[Path], verbose: bool):
    """
    List debits far above their category's average.

    QIF_FILE: Path to the QIF file
    """
    try:
        finance_config, _, data = _load(qif_file, config, verbose)
        flagged = AnalysisEngine(finance_config).detect_anomalies(data)
    except FinanceError as e:
        _fail(e, verbose)
        return

    if not flagged:
        console.print("[green]No anomalies detected[/green]")
        return

    table = Table(title="Anomalous Transactions")
    table.add_column("Date")
    table.add_column("Payee")
    table.add_column("Category")
    table.add_column("Amount", justify="right")

    for txn in flagged:
        table.add_row(
            txn.date.strftime("%Y-%m-%d"),
            txn.payee or "-",
            txn.category or finance_config.analysis.uncategorized_label,
            _money(txn.amount),
        )

    console.print(table)
    console.print(f"\nAnomalies: {len(flagged)}")


@main.command()
@qif_file_argument
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("--year", type=int, default=None, help="Year for the monthly sheet")
@click.option("--month", type=click.IntRange(1, 12), default=None, help="Month for the monthly sheet")
@click.option("--months", type=click.IntRange(min=0), default=None, help="Trend lookback in months")
@config_option
@verbose_option
def report(
    qif_file: Path,
    output: Optional[Path],
    year: Optional[int],
    month: Optional[int],
    months: Optional[int],
    config: Optional[Path],
    verbose: bool,
):
    """
    Generate an Excel workbook with all analysis reports.

    QIF_FILE: Path to the QIF file
    """
    if (year is None) != (month is None):
        raise click.UsageError("--year and --month must be given together")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing QIF file...", total=None)
            finance_config, _, data = _load(qif_file, config, verbose)
            progress.update(task, completed=True)

            task = progress.add_task("Running analysis...", total=None)
            engine = AnalysisEngine(finance_config)
            if months is None:
                months = finance_config.analysis.default_trend_months

            monthly_report = None
            if year is not None and month is not None:
                monthly_report = engine.generate_monthly_report(data, year, month)

            category_results = engine.analyze_categories(data)
            trend_results = engine.analyze_spending_trends(data, months)
            anomaly_results = engine.detect_anomalies(data)
            progress.update(task, completed=True)

        if output is None:
            now = datetime.now()
            output = Path(
                finance_config.output.excel.filename_template.format(
                    date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
                )
            )

        report_path = ExcelReportGenerator(finance_config).generate_report(
            data,
            output,
            monthly_report=monthly_report,
            categories=category_results,
            trends=trend_results,
            anomalies=anomaly_results,
            source_name=qif_file.name,
        )
    except FinanceError as e:
        _fail(e, verbose)
        return

    console.print(f"\n[green]Report generated: {report_path}[/green]")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


if __name__ == "__main__":
    main()
