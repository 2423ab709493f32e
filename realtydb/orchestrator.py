"""Migration orchestrator - coordinates the SQLite to PostgreSQL migration."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .drivers.database import Database
from .errors import ConfigurationError
from .models.schema import Dialect, TableDescriptor
from .models.migration import (
    MigrationConfig,
    MigrationRun,
    MigrationStatus,
)
from .services.schema_registry import SchemaRegistry
from .services.validator import SchemaValidator
from .extractors.base import BaseExtractor
from .extractors.sqlite_extractor import SQLiteExtractor
from .loaders.base import BaseLoader
from .loaders.database_loader import DatabaseLoader

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """
    Orchestrates the complete migration process.

    Handles:
    - Creating the target schema from the translated source schema
    - Describing and ordering the source tables
    - Exporting and loading each table in turn
    - Progress tracking and reporting

    Tables are migrated strictly one after another with no transaction
    around the run. A failing table is recorded and the run moves on.
    """

    def __init__(
        self,
        config: MigrationConfig,
        source: Database,
        target: Database,
        extractor: Optional[BaseExtractor] = None,
        loader: Optional[BaseLoader] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            source: Facade over the embedded database
            target: Facade over the hosted database
            extractor: Extractor to read tables with, defaults to SQLiteExtractor
            loader: Loader to write tables with, defaults to DatabaseLoader
        """
        self.config = config
        self.source = source
        self.target = target
        self.extractor = extractor or SQLiteExtractor(source, batch_size=config.batch_size)
        self.loader = loader or DatabaseLoader(
            target,
            preserve_ids=config.preserve_ids,
            batch_size=config.batch_size,
        )
        self.validator = SchemaValidator()
        self.registry = SchemaRegistry()

        self.run: Optional[MigrationRun] = None

    async def run_migration(self) -> MigrationRun:
        """
        Run the complete migration.

        Returns:
            MigrationRun with per-table results. Its status is FAILED only
            when the run could not proceed at all; table failures give
            COMPLETED_WITH_ERRORS.
        """
        self.run = MigrationRun(
            name=self.config.name,
            source=self.config.sqlite_path,
            target=self.target.backend.describe(),
            table_order=self.config.table_order,
        )
        self.run.started_at = datetime.utcnow()

        try:
            if self.config.create_schema and self.config.schema_path:
                logger.info("=== PHASE 1: SCHEMA ===")
                self.run.status = MigrationStatus.CREATING_SCHEMA
                await self._create_schema()

            logger.info("=== PHASE 2: TABLES ===")
            self.run.status = MigrationStatus.EXTRACTING
            tables = await self.plan_tables()

            logger.info("=== PHASE 3: DATA ===")
            self.run.status = MigrationStatus.LOADING
            for table in tables:
                await self._migrate_table(table)

            if self.run.failed_tables:
                self.run.status = MigrationStatus.COMPLETED_WITH_ERRORS
                logger.warning(
                    f"Migration completed with failed tables: {', '.join(self.run.failed_tables)}"
                )
            else:
                self.run.status = MigrationStatus.COMPLETED
                logger.info("=== MIGRATION COMPLETED ===")

        except Exception as e:
            logger.error(f"Migration failed: {e}")
            self.run.errors.append({
                "phase": self.run.status.value,
                "error": str(e),
                "timestamp": datetime.utcnow().isoformat(),
            })
            self.run.status = MigrationStatus.FAILED

        finally:
            self.run.completed_at = datetime.utcnow()
            self.run.update_totals()
            if self.config.report_dir:
                self._save_report()

        return self.run

    async def _create_schema(self):
        """Apply the schema script to the target, tolerating failing statements."""
        path = Path(self.config.schema_path)
        if not path.exists():
            raise ConfigurationError(f"Schema file not found: {path}")

        if self.target.dialect == Dialect.POSTGRES:
            translated = self.target.translator.translate_schema(path.read_text(encoding="utf-8"))
            for warning in self.validator.validate_script(translated):
                message = f"{warning.message}: {warning.statement}"
                self.run.schema_warnings.append(message)
                logger.warning(f"Schema warning: {message}")

        result = await self.target.exec_script(str(path), tolerate_errors=True)
        for failure in result.failed:
            self.run.schema_warnings.append(f"{failure['error']}: {failure['statement']}")
        logger.info(f"Schema applied: {result.executed}/{result.total} statements succeeded")

    async def plan_tables(self) -> List[TableDescriptor]:
        """Describe the source tables and put them in load order."""
        for table in await self.extractor.describe_all():
            self.registry.register_table(table)

        tables = [
            t for t in self.registry.ordered(self.config.table_order)
            if t.name not in self.config.exclude_tables
        ]
        self.run.tables = [t.to_dict() for t in tables]
        logger.info(
            f"Migrating {len(tables)} tables in {self.config.table_order.value} order: "
            f"{', '.join(t.name for t in tables)}"
        )
        for name in self.config.exclude_tables:
            if self.registry.get_table(name):
                step = self.run.add_step(name=f"Migrate {name}", table=name)
                step.status = MigrationStatus.SKIPPED
        return tables

    async def _migrate_table(self, table: TableDescriptor):
        """Export one table and load it into the target."""
        step = self.run.add_step(name=f"Migrate {table.name}", table=table.name)
        step.started_at = datetime.utcnow()
        self.run.current_step = step.id
        logger.info(f"Migrating table: {table.name}")

        try:
            step.status = MigrationStatus.EXTRACTING
            extraction = await self.extractor.extract_table(table)
            step.rows_read = extraction.total_extracted
            step.warnings.extend(extraction.warnings)
            logger.info(f"Found {extraction.total_extracted} rows in {table.name}")
            logger.debug(f"Extraction: {extraction.to_dict()}")

            step.status = MigrationStatus.LOADING
            result = await self.loader.load_table(table, extraction.rows)
            step.rows_inserted = result.total_succeeded
            step.rows_skipped = result.total_skipped
            step.errors.extend(result.errors)
            logger.debug(f"Load result: {result.to_dict()}")

            if result.skipped_reason:
                step.status = MigrationStatus.SKIPPED
                step.warnings.append(result.skipped_reason)
            elif result.success:
                step.status = MigrationStatus.COMPLETED
            else:
                step.status = MigrationStatus.FAILED
                logger.error(f"Table {table.name} failed: {result.errors[-1]['error']}")

        except Exception as e:
            step.status = MigrationStatus.FAILED
            step.errors.append({"error": str(e)})
            logger.error(f"Table {table.name} failed: {e}")

        finally:
            step.completed_at = datetime.utcnow()

    def _save_report(self):
        """Save the migration report."""
        logs_dir = Path(self.config.report_dir) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        filepath = logs_dir / f"migration_report_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filepath, 'w') as f:
            report = self.run.to_dict()
            report["config"] = self.config.to_dict()
            json.dump(report, f, indent=2, default=str)
        logger.info(f"Saved migration report to {filepath}")

    def summary(self) -> Dict[str, object]:
        """Short summary of the last run, for console output."""
        if not self.run:
            return {}
        return {
            "status": self.run.status.value,
            "tables": len(self.run.steps),
            "rows_read": self.run.total_rows_read,
            "rows_inserted": self.run.total_rows_inserted,
            "rows_skipped": self.run.total_rows_skipped,
            "failed_tables": self.run.failed_tables,
            "skipped_tables": self.run.skipped_tables,
            "schema_warnings": len(self.run.schema_warnings),
        }
