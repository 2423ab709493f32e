"""Base extractor interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional
from datetime import datetime
import logging

from ..models.record import SourceRow
from ..models.schema import TableDescriptor

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Result of extracting one table."""
    table: TableDescriptor
    rows: List[SourceRow] = field(default_factory=list)
    total_extracted: int = 0
    warnings: List[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "table": self.table.name,
            "total_extracted": self.total_extracted,
            "warnings": self.warnings,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
        }


class BaseExtractor(ABC):
    """
    Base class for table extractors.

    Extractors enumerate the user tables of a source database, describe
    their columns and read their rows as SourceRow objects.
    """

    def __init__(self, batch_size: int = 500):
        """
        Initialize the extractor.

        Args:
            batch_size: Default number of rows per batch when streaming
        """
        self.batch_size = batch_size
        self._warnings: List[str] = []

    @abstractmethod
    async def list_tables(self) -> List[str]:
        """List user table names in declaration order."""
        pass

    @abstractmethod
    async def describe_table(self, name: str, position: int = 0) -> TableDescriptor:
        """
        Read the column and foreign-key descriptors of a table.

        Args:
            name: Table name
            position: Declaration position to record on the descriptor

        Returns:
            TableDescriptor for the table
        """
        pass

    @abstractmethod
    async def extract_batch(
        self,
        table: TableDescriptor,
        offset: int = 0,
        limit: int = 500,
    ) -> List[SourceRow]:
        """
        Read a batch of rows in a stable order.

        Args:
            table: Table to read
            offset: Number of rows to skip
            limit: Maximum rows to read

        Returns:
            List of SourceRow objects
        """
        pass

    async def describe_all(self) -> List[TableDescriptor]:
        """Describe every user table, keeping declaration positions."""
        names = await self.list_tables()
        return [await self.describe_table(name, position) for position, name in enumerate(names)]

    async def stream(
        self,
        table: TableDescriptor,
        batch_size: Optional[int] = None,
    ) -> AsyncIterator[List[SourceRow]]:
        """
        Stream rows in batches.

        Args:
            table: Table to read
            batch_size: Size of each batch (defaults to self.batch_size)

        Yields:
            Batches of SourceRow objects
        """
        batch_size = batch_size or self.batch_size
        offset = 0

        while True:
            batch = await self.extract_batch(table, offset=offset, limit=batch_size)
            if not batch:
                break

            yield batch
            offset += len(batch)

            if len(batch) < batch_size:
                break

    async def extract_table(self, table: TableDescriptor) -> ExtractionResult:
        """
        Read every row of a table.

        Returns:
            ExtractionResult holding the rows
        """
        self.reset()
        started_at = datetime.utcnow()
        rows: List[SourceRow] = []
        async for batch in self.stream(table):
            rows.extend(batch)

        result = self.get_extraction_result(table, rows)
        result.started_at = started_at
        result.completed_at = datetime.utcnow()
        logger.debug(f"Extracted {len(rows)} rows from {table.name}")
        return result

    def add_warning(self, message: str) -> None:
        """Add a warning to the extraction."""
        self._warnings.append(message)
        logger.warning(f"Extraction warning: {message}")

    def get_extraction_result(self, table: TableDescriptor, rows: List[SourceRow]) -> ExtractionResult:
        """Create an ExtractionResult from extracted rows."""
        return ExtractionResult(
            table=table,
            rows=rows,
            total_extracted=len(rows),
            warnings=self._warnings.copy(),
        )

    def reset(self) -> None:
        """Reset the extractor state."""
        self._warnings = []
