"""Tests for configuration loading and logging setup."""

import logging
from decimal import Decimal
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from qif_finance.config import (
    FinanceConfig,
    _deep_merge,
    generate_default_config,
    get_default_config,
    load_config,
)
from qif_finance.models.financial import AccountType
from qif_finance.parsers.qif_parser import QIFParser
from qif_finance.utils.exceptions import ConfigurationError
from qif_finance.utils.logging_config import LOGGER_NAME, get_logger, setup_logging


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self):
        config = load_config()

        assert isinstance(config, FinanceConfig)
        assert config.input.encoding == "utf-8"
        assert config.input.account_types["bank"] == AccountType.CHECKING
        assert config.input.account_types["ccard"] == AccountType.CREDIT_CARD
        assert config.analysis.anomaly_multiplier == Decimal("3")
        assert config.analysis.trend_threshold == Decimal("0.1")
        assert config.analysis.uncategorized_label == "Uncategorized"
        assert config.output.sheets.transactions.name == "Transactions"
        assert config.config_file_path is None

    def test_missing_file_falls_back_to_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "absent.yaml")

        assert config.config_file_path is None
        assert config.logging.level == "INFO"

    def test_yaml_overrides_are_merged(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "analysis:\n"
            "  anomaly_multiplier: '2.5'\n"
            "input:\n"
            "  account_types:\n"
            "    port: investment\n"
            "output:\n"
            "  sheets:\n"
            "    trends:\n"
            "      enabled: false\n"
        )

        config = load_config(config_path)

        assert config.analysis.anomaly_multiplier == Decimal("2.5")
        assert config.analysis.trend_threshold == Decimal("0.1")
        assert config.input.account_types["port"] == AccountType.INVESTMENT
        assert config.input.account_types["bank"] == AccountType.CHECKING
        assert not config.output.sheets.trends.enabled
        assert config.output.sheets.trends.name == "Spending Trends"
        assert config.config_file_path == str(config_path)

    def test_custom_alias_reaches_parser(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("input:\n  account_types:\n    port: investment\n")

        parser = QIFParser(load_config(config_path))

        assert parser.parse_account_type("Port") == AccountType.INVESTMENT

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("")

        assert load_config(config_path).analysis.default_trend_months == 6

    def test_invalid_yaml(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("analysis: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path)

    def test_non_mapping_top_level(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path)

    def test_invalid_values(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("analysis:\n  default_trend_months: -3\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path)

    def test_unknown_account_kind(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("input:\n  account_types:\n    port: brokerage\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path)


class TestDeepMerge:
    """Tests for _deep_merge."""

    def test_nested_override(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}

        merged = _deep_merge(base, {"a": {"c": 20}, "e": 5})

        assert merged == {"a": {"b": 1, "c": 20}, "d": 3, "e": 5}
        assert base == {"a": {"b": 1, "c": 2}, "d": 3}

    def test_scalar_replaces_mapping(self):
        assert _deep_merge({"a": {"b": 1}}, {"a": None}) == {"a": None}


class TestGenerateDefaultConfig:
    """Tests for generate_default_config."""

    def test_generated_file_loads(self, tmp_path: Path):
        output = tmp_path / "nested" / "config.yaml"

        generate_default_config(output)

        assert output.read_text().startswith("# QIF Finance Configuration")
        config = load_config(output)
        assert config.analysis.anomaly_multiplier == Decimal("3")
        assert config.input.date_formats == get_default_config()["input"]["date_formats"]


class TestLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def reset_logger(self):
        yield
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_console_handler(self):
        logger = setup_logging(logging.DEBUG)

        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "qif.log"

        logger = setup_logging(logging.INFO, log_file)
        get_logger("tests").info("hello from the tests")
        for handler in logger.handlers:
            handler.flush()

        assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
        assert "hello from the tests" in log_file.read_text()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_module_loggers_are_children(self):
        assert get_logger("parsers").name == f"{LOGGER_NAME}.parsers"
