"""QIF import/export and personal finance analysis."""

__version__ = "0.1.0"
