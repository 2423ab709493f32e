"""Record models for rows, statements and execution results."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .schema import PlaceholderStyle
from ..errors import ParameterCountError


@dataclass
class ValidationError:
    """A problem found in a translated script."""
    statement: str
    message: str
    error_type: str = "validation"
    severity: str = "warning"  # error, warning, info
    suggested_fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "statement": self.statement,
            "message": self.message,
            "error_type": self.error_type,
            "severity": self.severity,
            "suggested_fix": self.suggested_fix,
        }


@dataclass(frozen=True)
class SourceRow:
    """A row read from the embedded database."""
    table: str
    data: Dict[str, Any]

    def get(self, column: str, default: Any = None) -> Any:
        return self.data.get(column, default)


@dataclass(frozen=True)
class TranslatedStatement:
    """
    A SQL string together with the parameters it is executed with.

    The placeholder count is checked on construction, so a statement that
    would be rejected by the driver for a parameter mismatch never gets that
    far.
    """
    sql: str
    params: Tuple[Any, ...] = ()
    style: PlaceholderStyle = PlaceholderStyle.NUMERIC
    placeholder_count: int = 0

    def __post_init__(self):
        if self.placeholder_count != len(self.params):
            raise ParameterCountError(self.placeholder_count, len(self.params), self.sql)

    @property
    def is_empty(self) -> bool:
        """True when translation left nothing to execute (e.g. a bare PRAGMA)."""
        return not self.sql.strip().rstrip(";").strip()


@dataclass
class RunResult:
    """Outcome of a statement that returns no rows."""
    changes: int = 0
    last_id: Optional[int] = None
    status: str = ""
