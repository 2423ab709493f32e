"""Registry of table descriptors and the order they are migrated in."""

import logging
from typing import Dict, List, Optional, Set

from ..models.schema import TableDescriptor
from ..models.migration import TableOrder

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """
    Registry for the tables of one source database.

    Supports:
    - Registering table descriptors as they are introspected
    - Listing tables in declaration order
    - Ordering tables so referenced tables load before referencing ones
    """

    def __init__(self, tables: Optional[List[TableDescriptor]] = None):
        """
        Initialize the schema registry.

        Args:
            tables: Optional descriptors to register right away
        """
        self.tables: Dict[str, TableDescriptor] = {}
        for table in tables or []:
            self.register_table(table)

    def register_table(self, table: TableDescriptor) -> None:
        """Register a table descriptor."""
        self.tables[table.name] = table

    def get_table(self, name: str) -> Optional[TableDescriptor]:
        """Get a table by name."""
        return self.tables.get(name)

    def list_tables(self) -> List[str]:
        """List table names in declaration order."""
        return [t.name for t in self.declared_order()]

    def declared_order(self) -> List[TableDescriptor]:
        """Tables in the order the source schema declares them."""
        return sorted(self.tables.values(), key=lambda t: t.position)

    def dependency_order(self) -> List[TableDescriptor]:
        """
        Tables ordered so every table comes after the tables it references.

        Ties are broken by declaration order. References to tables that are
        not registered are ignored. Tables caught in a reference cycle are
        appended in declaration order and logged, since no order satisfies
        them.

        Returns:
            List of table descriptors
        """
        declared = self.declared_order()
        remaining = {t.name: {d for d in t.depends_on if d in self.tables} for t in declared}
        ordered: List[TableDescriptor] = []
        placed: Set[str] = set()

        while remaining:
            candidates = [t for t in declared if t.name in remaining]
            ready = [t for t in candidates if not (remaining[t.name] - placed)]
            if ready:
                table = ready[0]
            else:
                table = candidates[0]
                logger.warning(
                    f"Foreign-key cycle between tables {', '.join(t.name for t in candidates)}; "
                    f"loading {table.name} first"
                )
            ordered.append(table)
            placed.add(table.name)
            del remaining[table.name]

        return ordered

    def ordered(self, order: TableOrder) -> List[TableDescriptor]:
        """Tables in the requested migration order."""
        if order == TableOrder.DEPENDENCY:
            return self.dependency_order()
        return self.declared_order()

    def dependents_of(self, name: str) -> List[str]:
        """Tables that reference the given table."""
        return [t.name for t in self.declared_order() if name in t.depends_on]
