"""Loader inserting exported rows through the database facade."""

import logging
from datetime import datetime
from typing import List, Optional

from .base import BaseLoader, LoadResult
from ..drivers.database import Database
from ..models.schema import Dialect, TableDescriptor
from ..models.record import SourceRow
from ..services.query_builder import InsertQuery, batched, quote_identifier
from ..services.transformer import RowTransformer

logger = logging.getLogger(__name__)

# Bound parameters allowed in one statement.
MAX_PARAMS = {
    Dialect.POSTGRES: 32767,
    Dialect.SQLITE: 999,
}


class DatabaseLoader(BaseLoader):
    """
    Loader writing rows with multi-row ``INSERT ... ON CONFLICT DO NOTHING``.

    The integer primary key is left out so the target generates it, unless
    ``preserve_ids`` is set. Rows rejected by a unique constraint are not
    errors: they are counted as skipped. Any other failure stops the table
    and is reported in the LoadResult; rows of earlier batches stay
    inserted.

    A table whose copies cannot be told apart (no unique constraint and a
    regenerated key) is only loaded while the target table is empty.
    """

    def __init__(
        self,
        database: Database,
        preserve_ids: bool = False,
        batch_size: int = 500,
        transformer: Optional[RowTransformer] = None,
        dry_run: bool = False,
    ):
        """
        Initialize the loader.

        Args:
            database: Facade over the target database
            preserve_ids: Copy primary keys instead of letting the target
                generate them
            batch_size: Maximum rows per INSERT statement
            transformer: Row transformer, defaults to one for the target dialect
            dry_run: Count rows without writing them
        """
        super().__init__(batch_size=batch_size, dry_run=dry_run)
        self.database = database
        self.preserve_ids = preserve_ids
        self.transformer = transformer or RowTransformer(database.dialect)

    def rows_per_statement(self, column_count: int) -> int:
        """Largest batch that stays under the dialect's parameter limit."""
        limit = MAX_PARAMS.get(self.database.dialect, 999)
        return max(1, min(self.batch_size, limit // max(1, column_count)))

    async def load_table(self, table: TableDescriptor, rows: List[SourceRow]) -> LoadResult:
        result = LoadResult(table=table.name)
        result.started_at = datetime.utcnow()

        if not rows:
            logger.info(f"No data to insert for table {table.name}")
            result.completed_at = datetime.utcnow()
            return result

        columns = table.insert_columns(self.preserve_ids)
        if not columns:
            result.errors.append({"error": "Table has no columns to insert besides its key"})
            result.total_failed = len(rows)
            result.completed_at = datetime.utcnow()
            logger.warning(f"Skipping {table.name}: no insertable columns")
            return result

        if not table.has_conflict_target(self.preserve_ids):
            existing = await self.count_existing(table)
            if existing:
                result.skipped_reason = (
                    f"target already holds {existing} row(s) and {table.name} has no unique "
                    f"constraint to detect copies with"
                )
                result.total_skipped = len(rows)
                result.completed_at = datetime.utcnow()
                logger.warning(f"Skipping {table.name}: {result.skipped_reason}")
                return result

        names = [c.name for c in columns]
        dialect = self.database.dialect

        for offset, chunk in batched(rows, self.rows_per_statement(len(columns))):
            result.total_attempted += len(chunk)
            if self.dry_run:
                result.total_succeeded += len(chunk)
                continue

            try:
                values = [self.transformer.transform_row(table, row, columns) for row in chunk]
                statement = InsertQuery(
                    table=table.name,
                    columns=names,
                    rows=values,
                    on_conflict_do_nothing=True,
                ).compile(dialect)
                run = await self.database.execute(statement, op="insert")
            except Exception as e:
                failed = len(rows) - offset
                result.total_failed += failed
                result.errors.append({"offset": offset, "error": str(e)})
                logger.error(f"Error inserting data into {table.name} at row {offset}: {e}")
                break

            result.batches += 1
            result.total_succeeded += run.changes
            result.total_skipped += len(chunk) - run.changes

        if result.total_skipped:
            logger.info(
                f"{result.total_skipped} row(s) of {table.name} already present, skipped"
            )

        if self.preserve_ids and result.total_succeeded and not self.dry_run:
            await self.reset_sequence(table)

        result.completed_at = datetime.utcnow()
        logger.info(f"Inserted {result.total_succeeded} rows into {table.name}")
        return result

    async def count_existing(self, table: TableDescriptor) -> int:
        """Number of rows the target table holds already."""
        row = await self.database.get(f"SELECT COUNT(*) AS n FROM {quote_identifier(table.name)}")
        return int(row["n"]) if row else 0

    async def reset_sequence(self, table: TableDescriptor) -> None:
        """
        Move the serial sequence of a table past its largest copied key.

        Only PostgreSQL keeps sequences; SQLite derives the next rowid from
        the table itself.
        """
        key = table.generated_key
        if self.database.dialect != Dialect.POSTGRES or key is None:
            return

        await self.database.get(
            f"SELECT setval(pg_get_serial_sequence(?, ?), "
            f"COALESCE(MAX({quote_identifier(key.name)}), 1), "
            f"MAX({quote_identifier(key.name)}) IS NOT NULL) "
            f"FROM {quote_identifier(table.name)}",
            [quote_identifier(table.name), _catalog_name(key.name)],
        )
        logger.debug(f"Reset sequence of {table.name}.{key.name}")


def _catalog_name(name: str) -> str:
    # Column names created unquoted are stored folded to lower case.
    return name.lower() if quote_identifier(name) == name else name
