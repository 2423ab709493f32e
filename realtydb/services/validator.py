"""Checks translated DDL for constructs PostgreSQL will reject."""

import re
import logging
from typing import Callable, Dict, List, Tuple

from ..models.record import ValidationError
from .translator import CONSTRAINT_WORDS, MaskedSQL, split_statements

logger = logging.getLogger(__name__)

_CREATE_TABLE = re.compile(
    r"^\s*CREATE\s+(?:TEMP(?:ORARY)?\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?[\w.]+\s*\((?P<body>.*)\)",
    re.IGNORECASE | re.DOTALL,
)
_TABLE_CONSTRAINTS = {"PRIMARY", "FOREIGN", "UNIQUE", "CHECK", "CONSTRAINT"}


class SchemaValidator:
    """
    Validator for translated schema scripts.

    Translation is textual and never fails, so this is where leftovers of
    the SQLite dialect are surfaced before the script is executed:

    - AUTOINCREMENT, WITHOUT ROWID and PRAGMA that survived translation
    - SQLite date functions such as datetime('now')
    - Integer-typed boolean defaults (``DEFAULT false`` on an INTEGER column)
    - Columns declared without a type, which SQLite allows
    """

    def __init__(self):
        """Initialize the validator."""
        self._checks: List[Tuple[str, re.Pattern, str, str]] = [
            (
                "autoincrement",
                re.compile(r"\bAUTOINCREMENT\b", re.IGNORECASE),
                "AUTOINCREMENT is not valid PostgreSQL",
                "Declare the key as SERIAL PRIMARY KEY",
            ),
            (
                "without_rowid",
                re.compile(r"\bWITHOUT\s+ROWID\b", re.IGNORECASE),
                "WITHOUT ROWID is SQLite only",
                "Remove the table option",
            ),
            (
                "pragma",
                re.compile(r"^\s*PRAGMA\b", re.IGNORECASE),
                "PRAGMA statements have no PostgreSQL equivalent",
                "Remove the statement",
            ),
            (
                "sqlite_function",
                re.compile(r"\b(datetime|strftime|julianday)\s*\(", re.IGNORECASE),
                "SQLite date function in statement",
                "Use CURRENT_TIMESTAMP or to_char()",
            ),
            (
                "integer_boolean_default",
                re.compile(r"\bINT(EGER)?\b[^,()]*\bDEFAULT\s+(true|false)\b", re.IGNORECASE),
                "Boolean default on an integer column",
                "Use DEFAULT 0 or DEFAULT 1",
            ),
        ]
        self._custom_validators: Dict[str, Callable[[str], List[ValidationError]]] = {}

    def register_validator(self, name: str, func: Callable[[str], List[ValidationError]]) -> None:
        """Register a custom check run against every statement."""
        self._custom_validators[name] = func

    def validate_script(self, script: str) -> List[ValidationError]:
        """
        Validate a translated script statement by statement.

        Args:
            script: PostgreSQL DDL produced by the translator

        Returns:
            List of validation errors, all with warning severity
        """
        errors = []
        for statement in split_statements(script):
            errors.extend(self.validate_statement(statement))
        return errors

    def validate_statement(self, statement: str) -> List[ValidationError]:
        """Validate a single statement."""
        errors = []
        masked = MaskedSQL(statement)
        code = masked.text
        summary = _summarize(statement)

        for error_type, pattern, message, fix in self._checks:
            if pattern.search(code):
                errors.append(ValidationError(
                    statement=summary,
                    message=message,
                    error_type=error_type,
                    suggested_fix=fix,
                ))

        untyped = [masked.unmask(name) for name in _untyped_columns(code)]
        if untyped:
            errors.append(ValidationError(
                statement=summary,
                message=f"Column without a type: {', '.join(untyped)}",
                error_type="untyped_column",
                suggested_fix="Declare a type for the column",
            ))

        for name, func in self._custom_validators.items():
            try:
                errors.extend(func(statement))
            except Exception as e:
                logger.error(f"Custom validator {name} failed: {e}")

        return errors


def _summarize(statement: str, width: int = 100) -> str:
    flat = " ".join(statement.split())
    if len(flat) <= width:
        return flat
    return flat[:width] + "..."


def _untyped_columns(code: str) -> List[str]:
    """Names of the columns a CREATE TABLE statement declares without a type."""
    match = _CREATE_TABLE.match(code)
    if not match:
        return []

    names = []
    for definition in _split_definitions(match.group("body")):
        tokens = definition.split()
        if not tokens or tokens[0].upper() in _TABLE_CONSTRAINTS:
            continue
        if len(tokens) == 1 or tokens[1].upper() in CONSTRAINT_WORDS:
            names.append(tokens[0])
    return names


def _split_definitions(body: str) -> List[str]:
    # Commas inside parentheses belong to types such as DECIMAL(10, 2).
    parts, depth, current = [], 0, []
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts
