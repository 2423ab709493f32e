"""Data models for the migration tooling."""

from .schema import (
    Dialect,
    PlaceholderStyle,
    ColumnDescriptor,
    ForeignKey,
    TableDescriptor,
)
from .migration import (
    MigrationConfig,
    MigrationRun,
    MigrationStep,
    MigrationStatus,
    TableOrder,
)
from .record import (
    SourceRow,
    RunResult,
    TranslatedStatement,
    ValidationError,
)

__all__ = [
    "Dialect",
    "PlaceholderStyle",
    "ColumnDescriptor",
    "ForeignKey",
    "TableDescriptor",
    "MigrationConfig",
    "MigrationRun",
    "MigrationStep",
    "MigrationStatus",
    "TableOrder",
    "SourceRow",
    "RunResult",
    "TranslatedStatement",
    "ValidationError",
]
