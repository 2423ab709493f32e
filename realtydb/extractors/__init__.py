"""Extractors reading tables out of a source database."""

from .base import BaseExtractor, ExtractionResult
from .sqlite_extractor import SQLiteExtractor

__all__ = [
    "BaseExtractor",
    "ExtractionResult",
    "SQLiteExtractor",
]
