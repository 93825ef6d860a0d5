"""Analysis engine for financial reports."""

from .engine import AnalysisEngine

__all__ = ["AnalysisEngine"]
