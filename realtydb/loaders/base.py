"""Base loader interface for target databases."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime

from ..models.record import SourceRow
from ..models.schema import TableDescriptor


@dataclass
class LoadResult:
    """Result of loading one table."""
    table: str
    total_attempted: int = 0
    total_succeeded: int = 0
    total_failed: int = 0
    total_skipped: int = 0  # Rows the conflict policy left out
    batches: int = 0
    skipped_reason: Optional[str] = None  # Set when the whole table was left out
    errors: List[Dict[str, Any]] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def success_rate(self) -> float:
        if self.total_attempted == 0:
            return 0.0
        return self.total_succeeded / self.total_attempted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "total_attempted": self.total_attempted,
            "total_succeeded": self.total_succeeded,
            "total_failed": self.total_failed,
            "total_skipped": self.total_skipped,
            "batches": self.batches,
            "skipped_reason": self.skipped_reason,
            "success_rate": self.success_rate,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "errors": self.errors,
        }


class BaseLoader(ABC):
    """
    Base class for data loaders.

    Loaders write exported rows into a target database, one table at a
    time.
    """

    def __init__(self, batch_size: int = 500, dry_run: bool = False):
        """
        Initialize the loader.

        Args:
            batch_size: Number of rows per INSERT statement
            dry_run: If True, count rows without writing them
        """
        self.batch_size = batch_size
        self.dry_run = dry_run

    @abstractmethod
    async def load_table(self, table: TableDescriptor, rows: List[SourceRow]) -> LoadResult:
        """
        Load all rows of one table.

        Args:
            table: Descriptor of the source table
            rows: Rows exported from the source

        Returns:
            LoadResult with inserted, skipped and failed counts
        """
        pass
