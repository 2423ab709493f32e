"""Migration execution models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import uuid


class MigrationStatus(str, Enum):
    """Status of a migration run or step."""
    PENDING = "pending"
    CREATING_SCHEMA = "creating_schema"
    EXTRACTING = "extracting"
    LOADING = "loading"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"
    SKIPPED = "skipped"


class TableOrder(str, Enum):
    """How tables are ordered for loading."""
    DECLARED = "declared"  # Order of declaration in the source schema
    DEPENDENCY = "dependency"  # Parents before children, from extracted foreign keys


@dataclass
class MigrationStep:
    """Migration of a single table."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    table: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    rows_read: int = 0
    rows_inserted: int = 0
    rows_skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "table": self.table,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "rows_read": self.rows_read,
            "rows_inserted": self.rows_inserted,
            "rows_skipped": self.rows_skipped,
            "errors": self.errors,
            "warnings": self.warnings,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationRun:
    """A complete migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    status: MigrationStatus = MigrationStatus.PENDING

    source: str = ""
    target: str = ""  # Connection URL with the password masked
    table_order: TableOrder = TableOrder.DEPENDENCY

    # Timing
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Progress
    steps: List[MigrationStep] = field(default_factory=list)
    current_step: Optional[str] = None
    schema_warnings: List[str] = field(default_factory=list)
    tables: List[Dict[str, Any]] = field(default_factory=list)  # Descriptors in load order

    # Statistics
    total_rows_read: int = 0
    total_rows_inserted: int = 0
    total_rows_skipped: int = 0

    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "source": self.source,
            "target": self.target,
            "table_order": self.table_order.value,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "tables": self.tables,
            "steps": [s.to_dict() for s in self.steps],
            "current_step": self.current_step,
            "schema_warnings": self.schema_warnings,
            "total_rows_read": self.total_rows_read,
            "total_rows_inserted": self.total_rows_inserted,
            "total_rows_skipped": self.total_rows_skipped,
            "failed_tables": self.failed_tables,
            "skipped_tables": self.skipped_tables,
            "errors": self.errors,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def failed_tables(self) -> List[str]:
        """Names of tables whose migration failed."""
        return [s.table for s in self.steps if s.status == MigrationStatus.FAILED]

    @property
    def skipped_tables(self) -> List[str]:
        """Names of tables excluded or left as they were in the target."""
        return [s.table for s in self.steps if s.status == MigrationStatus.SKIPPED]

    def add_step(self, name: str, table: str) -> MigrationStep:
        """Add a new step to the migration."""
        step = MigrationStep(name=name, table=table)
        self.steps.append(step)
        return step

    def get_step(self, table: str) -> Optional[MigrationStep]:
        """Get the step migrating a table."""
        for step in self.steps:
            if step.table == table:
                return step
        return None

    def update_totals(self) -> None:
        """Update total statistics from steps."""
        self.total_rows_read = sum(s.rows_read for s in self.steps)
        self.total_rows_inserted = sum(s.rows_inserted for s in self.steps)
        self.total_rows_skipped = sum(s.rows_skipped for s in self.steps)


@dataclass
class MigrationConfig:
    """Configuration for a SQLite to PostgreSQL migration."""
    name: str = "sqlite-to-postgres"
    sqlite_path: str = "database/realestate.db"
    schema_path: Optional[str] = "database/schema.sql"

    # Execution options
    table_order: TableOrder = TableOrder.DEPENDENCY
    preserve_ids: bool = False
    batch_size: int = 500
    create_schema: bool = True
    fail_on_table_error: bool = False
    exclude_tables: List[str] = field(default_factory=list)

    # Output
    report_dir: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "sqlite_path": self.sqlite_path,
            "schema_path": self.schema_path,
            "table_order": self.table_order.value,
            "preserve_ids": self.preserve_ids,
            "batch_size": self.batch_size,
            "create_schema": self.create_schema,
            "fail_on_table_error": self.fail_on_table_error,
            "exclude_tables": self.exclude_tables,
            "report_dir": self.report_dir,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation."""
        return cls(
            name=data.get("name", "sqlite-to-postgres"),
            sqlite_path=data.get("sqlite_path", "database/realestate.db"),
            schema_path=data.get("schema_path", "database/schema.sql"),
            table_order=TableOrder(data.get("table_order", "dependency")),
            preserve_ids=data.get("preserve_ids", False),
            batch_size=data.get("batch_size", 500),
            create_schema=data.get("create_schema", True),
            fail_on_table_error=data.get("fail_on_table_error", False),
            exclude_tables=data.get("exclude_tables", []),
            report_dir=data.get("report_dir"),
        )
