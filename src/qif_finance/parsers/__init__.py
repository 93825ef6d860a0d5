"""Parser and writer for QIF files."""

from .qif_parser import LineCursor, QIFParser, SkippedRecord
from .qif_writer import QIFWriter

__all__ = ["LineCursor", "QIFParser", "QIFWriter", "SkippedRecord"]
