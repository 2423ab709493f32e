"""Schema models describing tables read from the embedded database."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import re


class Dialect(str, Enum):
    """SQL dialects realtydb can speak."""
    SQLITE = "sqlite"
    POSTGRES = "postgres"

    @property
    def placeholder_style(self) -> "PlaceholderStyle":
        """Positional parameter convention of the dialect."""
        if self is Dialect.POSTGRES:
            return PlaceholderStyle.NUMERIC
        return PlaceholderStyle.QMARK


class PlaceholderStyle(str, Enum):
    """Positional parameter markers."""
    QMARK = "qmark"  # ?, ?, ?
    NUMERIC = "numeric"  # $1, $2, $3


_BOOLEAN_TYPE = re.compile(r"^\s*BOOL(EAN)?\b", re.IGNORECASE)
_TEMPORAL_TYPE = re.compile(r"\b(DATE|DATETIME|TIME|TIMESTAMP)\b", re.IGNORECASE)
_INTEGER_TYPE = re.compile(r"\bINT", re.IGNORECASE)


@dataclass
class ColumnDescriptor:
    """A column as reported by the embedded database catalog."""
    name: str
    declared_type: str = ""
    not_null: bool = False
    default: Optional[str] = None
    primary_key: bool = False
    position: int = 0

    @property
    def is_boolean_like(self) -> bool:
        """
        Check if values of this column hold booleans stored as 0/1.

        SQLite has no boolean storage class, so a column counts as boolean
        when it is declared BOOLEAN/BOOL, or when it carries no type at all
        and defaults to 0 or 1.
        """
        if _BOOLEAN_TYPE.match(self.declared_type or ""):
            return True
        if not (self.declared_type or "").strip():
            return (self.default or "").strip() in ("0", "1")
        return False

    @property
    def is_temporal(self) -> bool:
        """Check if the column holds dates or timestamps."""
        return bool(_TEMPORAL_TYPE.search(self.declared_type or ""))

    @property
    def is_date_only(self) -> bool:
        return (self.declared_type or "").strip().upper() == "DATE"

    @property
    def is_integer(self) -> bool:
        return bool(_INTEGER_TYPE.search(self.declared_type or ""))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "declared_type": self.declared_type,
            "not_null": self.not_null,
            "default": self.default,
            "primary_key": self.primary_key,
            "position": self.position,
        }

    @classmethod
    def from_pragma(cls, row: Dict[str, Any]) -> "ColumnDescriptor":
        """Create from a ``PRAGMA table_info`` row."""
        return cls(
            name=row["name"],
            declared_type=row.get("type") or "",
            not_null=bool(row.get("notnull")),
            default=row.get("dflt_value"),
            primary_key=bool(row.get("pk")),
            position=row.get("cid", 0),
        )


@dataclass
class ForeignKey:
    """A foreign-key reference from one column to another table."""
    column: str
    referenced_table: str
    referenced_column: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "column": self.column,
            "referenced_table": self.referenced_table,
            "referenced_column": self.referenced_column,
        }

    @classmethod
    def from_pragma(cls, row: Dict[str, Any]) -> "ForeignKey":
        """Create from a ``PRAGMA foreign_key_list`` row."""
        return cls(
            column=row["from"],
            referenced_table=row["table"],
            referenced_column=row.get("to"),
        )


@dataclass
class TableDescriptor:
    """A user table of the embedded database with its columns."""
    name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    unique_indexes: List[List[str]] = field(default_factory=list)  # Columns of each UNIQUE constraint or index
    position: int = 0  # Declaration order in the source schema

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def primary_key_columns(self) -> List[ColumnDescriptor]:
        return [c for c in self.columns if c.primary_key]

    @property
    def generated_key(self) -> Optional[ColumnDescriptor]:
        """
        The column the target database generates on insert.

        Only a single-column integer primary key is regenerated; composite
        or text keys carry data and are always copied.
        """
        keys = self.primary_key_columns
        if len(keys) == 1 and keys[0].is_integer:
            return keys[0]
        return None

    def insert_columns(self, preserve_ids: bool = False) -> List[ColumnDescriptor]:
        """Columns written to the target table."""
        generated = None if preserve_ids else self.generated_key
        return [c for c in self.columns if c is not generated]

    def has_conflict_target(self, preserve_ids: bool = False) -> bool:
        """
        Check if copying a row twice hits a uniqueness constraint.

        Without one, ON CONFLICT DO NOTHING lets a repeated copy through as
        a new row. A regenerated key never conflicts.
        """
        if self.unique_indexes:
            return True
        if not self.primary_key_columns:
            return False
        return preserve_ids or self.generated_key is None

    @property
    def depends_on(self) -> List[str]:
        """Tables this table references, excluding self-references."""
        seen: List[str] = []
        for fk in self.foreign_keys:
            if fk.referenced_table != self.name and fk.referenced_table not in seen:
                seen.append(fk.referenced_table)
        return seen

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "position": self.position,
            "columns": [c.to_dict() for c in self.columns],
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
            "unique_indexes": self.unique_indexes,
        }
