"""Configuration loader and validation for QIF parsing and analysis settings."""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .models.financial import AccountType
from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_DATE_FORMATS = [
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%m-%d-%y",
    "%Y-%m-%d",
]

DEFAULT_ACCOUNT_TYPES = {
    "bank": "checking",
    "checking": "checking",
    "savings": "savings",
    "ccard": "credit_card",
    "credit": "credit_card",
    "invst": "investment",
    "investment": "investment",
    "cash": "cash",
    "liability": "liability",
    "asset": "asset",
}

# !Type: headers that introduce lists rather than transactions
DEFAULT_LIST_SECTION_TYPES = [
    "Cat",
    "Class",
    "Memorized",
    "Security",
    "Prices",
    "Invoice",
    "Template",
]


class InputConfig(BaseModel):
    """Configuration for QIF parsing."""

    encoding: str = "utf-8"
    date_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))
    account_types: dict[str, AccountType] = Field(
        default_factory=lambda: {
            alias: AccountType(kind) for alias, kind in DEFAULT_ACCOUNT_TYPES.items()
        }
    )
    list_section_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LIST_SECTION_TYPES)
    )
    default_currency: str = "USD"


class AnalysisConfig(BaseModel):
    """Thresholds and labels used by the analysis engine."""

    uncategorized_label: str = "Uncategorized"
    anomaly_multiplier: Decimal = Decimal("3")
    trend_threshold: Decimal = Decimal("0.1")
    default_trend_months: int = Field(default=6, ge=0)


class QIFOutputConfig(BaseModel):
    """Configuration for QIF export."""

    encoding: str = "utf-8"


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "qif_analysis_report_{date}_{time}.xlsx"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    monthly: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Monthly Report"))
    categories: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Categories"))
    trends: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Spending Trends"))
    anomalies: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Anomalies"))
    transactions: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Transactions")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    qif: QIFOutputConfig = Field(default_factory=QIFOutputConfig)
    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class FinanceConfig(BaseModel):
    """Main configuration model."""

    input: InputConfig = Field(default_factory=InputConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "encoding": "utf-8",
            "date_formats": list(DEFAULT_DATE_FORMATS),
            "account_types": dict(DEFAULT_ACCOUNT_TYPES),
            "list_section_types": list(DEFAULT_LIST_SECTION_TYPES),
            "default_currency": "USD",
        },
        "analysis": {
            "uncategorized_label": "Uncategorized",
            "anomaly_multiplier": "3",
            "trend_threshold": "0.1",
            "default_trend_months": 6,
        },
        "output": {
            "qif": {
                "encoding": "utf-8",
            },
            "excel": {
                "filename_template": "qif_analysis_report_{date}_{time}.xlsx",
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "monthly": {"enabled": True, "name": "Monthly Report"},
                "categories": {"enabled": True, "name": "Categories"},
                "trends": {"enabled": True, "name": "Spending Trends"},
                "anomalies": {"enabled": True, "name": "Anomalies"},
                "transactions": {"enabled": True, "name": "Transactions"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> FinanceConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        FinanceConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be read or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read config file {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping at the top level"
            )

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return FinanceConfig(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# QIF Finance Configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
