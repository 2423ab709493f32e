"""Loaders writing exported rows into a target database."""

from .base import BaseLoader, LoadResult
from .database_loader import DatabaseLoader

__all__ = [
    "BaseLoader",
    "LoadResult",
    "DatabaseLoader",
]
