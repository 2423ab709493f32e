"""Service layer: translation, validation, ordering and row conversion."""

from .schema_registry import SchemaRegistry
from .transformer import RowTransformer
from .translator import SQLTranslator, translate_query, translate_schema, split_statements
from .validator import SchemaValidator
from .query_builder import InsertQuery, SelectQuery
from .seeder import DatabaseSeeder

__all__ = [
    "SchemaRegistry",
    "RowTransformer",
    "SQLTranslator",
    "translate_query",
    "translate_schema",
    "split_statements",
    "SchemaValidator",
    "InsertQuery",
    "SelectQuery",
    "DatabaseSeeder",
]
