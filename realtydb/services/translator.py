"""SQLite to PostgreSQL dialect translation.

Two entry points share one rule set:

* ``translate_schema`` rewrites a DDL script (types, autoincrement keys,
  pragmas, boolean defaults).
* ``translate_query`` rewrites one application query at call time, which
  additionally numbers ``?`` placeholders as ``$1..$N``.

String literals, quoted identifiers and comments are masked before any rule
runs, so text inside them is never rewritten and a ``?`` inside a literal is
not a placeholder.
"""

import re
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import ParameterCountError, RealtyDBError
from ..models.schema import Dialect, PlaceholderStyle
from ..models.record import TranslatedStatement

logger = logging.getLogger(__name__)

_MASK = "__rdb_mask_{}__"
_MASK_PATTERN = re.compile(r"__rdb_mask_(\d+)__")

# Order matters: comments first so quotes inside them are ignored.
_LEXEME = re.compile(
    r"""
      (?P<line_comment>--[^\n]*)
    | (?P<block_comment>/\*.*?(?:\*/|$))
    | (?P<string>'(?:[^']|'')*(?:'|$))
    | (?P<identifier>"(?:[^"]|"")*(?:"|$))
    """,
    re.VERBOSE | re.DOTALL,
)

_NUMERIC_PLACEHOLDER = re.compile(r"\$(\d+)\b")

CONSTRAINT_WORDS = {
    "NOT", "NULL", "UNIQUE", "CHECK", "PRIMARY", "REFERENCES",
    "CONSTRAINT", "COLLATE", "GENERATED", "DEFAULT",
}


class MaskedSQL:
    """SQL text with literals, quoted identifiers and comments swapped for tokens."""

    def __init__(self, sql: str):
        self.original = sql
        self._segments: List[str] = []
        self.text = _LEXEME.sub(self._mask, sql)

    def _mask(self, match: "re.Match[str]") -> str:
        self._segments.append(match.group(0))
        return _MASK.format(len(self._segments) - 1)

    def segment(self, token: str) -> Optional[str]:
        """Return the original text behind a mask token, if it is one."""
        match = _MASK_PATTERN.fullmatch(token.strip())
        if not match:
            return None
        return self._segments[int(match.group(1))]

    def unmask(self, text: Optional[str] = None) -> str:
        text = self.text if text is None else text
        return _MASK_PATTERN.sub(lambda m: self._segments[int(m.group(1))], text)


def _column_type(rest: str) -> str:
    """Declared type from the text after a column name, or "" when untyped."""
    tokens = rest.split()
    if not tokens or tokens[0].upper() in CONSTRAINT_WORDS:
        return ""
    return tokens[0]


class SQLTranslator:
    """
    Rewrites SQLite SQL so PostgreSQL accepts it.

    Rules are plain text substitutions applied in registration order, all
    case-insensitive. Additional rules can be registered for project specific
    idioms.
    """

    def __init__(self):
        """Initialize the translator with the built-in rules."""
        self._rules: List[Tuple[str, Callable[[MaskedSQL, str], str]]] = []
        self._register_builtin_rules()

    def _register_builtin_rules(self) -> None:
        self.register_rule("autoincrement", self._rule_autoincrement)
        self.register_rule("datetime_now", self._rule_datetime_now)
        self.register_rule("datetime_type", self._rule_datetime_type)
        self.register_rule("pragma", self._rule_strip_pragma)
        self.register_rule("boolean_default", self._rule_boolean_default)
        self.register_rule("quoted_default", self._rule_quoted_default)
        self.register_rule("without_rowid", self._rule_without_rowid)

    def register_rule(self, name: str, func: Callable[[MaskedSQL, str], str]) -> None:
        """Register a rewrite rule receiving the masked SQL and current text."""
        self._rules.append((name, func))
        logger.debug(f"Registered translation rule {name}")

    @property
    def rule_names(self) -> List[str]:
        return [name for name, _ in self._rules]

    def translate_schema(self, ddl: str) -> str:
        """
        Translate a SQLite DDL script to PostgreSQL.

        Args:
            ddl: Full script, possibly holding many statements

        Returns:
            The rewritten script. Never raises; malformed input gives
            malformed output.
        """
        masked = MaskedSQL(ddl)
        return masked.unmask(self._apply_rules(masked))

    def translate_query(
        self,
        query: str,
        params: Optional[Sequence[Any]] = None,
        dialect: Dialect = Dialect.POSTGRES,
    ) -> TranslatedStatement:
        """
        Translate one application query for the given dialect.

        Queries are written in SQLite form with ``?`` markers. For PostgreSQL
        each marker becomes ``$1``, ``$2``, ... in left-to-right order and the
        schema rules are applied to any DDL in the query. For SQLite the query
        is left as is, except that ``$N`` markers (queries written for
        PostgreSQL) are turned into ``?`` with parameters reordered to match.

        Args:
            query: SQL text
            params: Positional parameters, in placeholder order
            dialect: Dialect of the backend that will execute the query

        Returns:
            TranslatedStatement with the placeholder count checked

        Raises:
            ParameterCountError: placeholder count differs from len(params)
        """
        params = list(params or [])
        masked = MaskedSQL(query)
        has_qmarks = "?" in masked.text
        numeric = [int(m.group(1)) for m in _NUMERIC_PLACEHOLDER.finditer(masked.text)]

        if has_qmarks and numeric:
            raise RealtyDBError("Query mixes ? and $N placeholders")
        if numeric and min(numeric) < 1:
            raise RealtyDBError("Invalid placeholder index $0")

        if dialect == Dialect.POSTGRES:
            text = self._apply_rules(masked)
            if has_qmarks:
                text, count = number_placeholders(text)
            else:
                count = max(numeric) if numeric else 0
            return TranslatedStatement(
                sql=masked.unmask(text),
                params=tuple(params),
                style=PlaceholderStyle.NUMERIC,
                placeholder_count=count,
            )

        text = masked.text
        if numeric:
            if max(numeric) > len(params):
                raise ParameterCountError(max(numeric), len(params), query)
            params = [params[i - 1] for i in numeric]
            text = _NUMERIC_PLACEHOLDER.sub("?", text)
        return TranslatedStatement(
            sql=masked.unmask(text),
            params=tuple(params),
            style=PlaceholderStyle.QMARK,
            placeholder_count=text.count("?"),
        )

    def _apply_rules(self, masked: MaskedSQL) -> str:
        text = masked.text
        for name, rule in self._rules:
            text = rule(masked, text)
        return text

    # Built-in rules

    def _rule_autoincrement(self, masked: MaskedSQL, text: str) -> str:
        text = re.sub(
            r"\bINTEGER(?P<key>(?:\s+NOT\s+NULL)?\s+PRIMARY\s+KEY)(?:\s+AUTOINCREMENT)?\b",
            lambda m: "SERIAL" + re.sub(r"\s+", " ", m.group("key")).upper(),
            text,
            flags=re.IGNORECASE,
        )
        return re.sub(r"\s*\bAUTOINCREMENT\b", "", text, flags=re.IGNORECASE)

    def _rule_datetime_now(self, masked: MaskedSQL, text: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            literal = masked.segment(match.group("arg")) or ""
            if literal.strip("'").lower() == "now":
                return "CURRENT_TIMESTAMP"
            return match.group(0)

        return re.sub(
            r"(?P<wrap>\(\s*)?\bDATETIME\s*\(\s*(?P<arg>__rdb_mask_\d+__)\s*\)(?(wrap)\s*\))",
            replace,
            text,
            flags=re.IGNORECASE,
        )

    def _rule_datetime_type(self, masked: MaskedSQL, text: str) -> str:
        return re.sub(r"\bDATETIME\b(?!\s*\()", "TIMESTAMP", text, flags=re.IGNORECASE)

    def _rule_strip_pragma(self, masked: MaskedSQL, text: str) -> str:
        return re.sub(
            r"(?:^|(?<=;))[ \t]*PRAGMA\b[^;\n]*;?",
            "",
            text,
            flags=re.IGNORECASE | re.MULTILINE,
        )

    def _rule_boolean_default(self, masked: MaskedSQL, text: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            declared = _column_type(match.group("rest"))
            if declared and not declared.upper().startswith("BOOL"):
                return match.group(0)
            literal = "true" if match.group("value") == "1" else "false"
            # PostgreSQL needs a type where SQLite accepted a bare column name.
            column_type = "" if declared else " BOOLEAN"
            return (
                f"{match.group('lead')}{match.group('name')}{column_type}"
                f"{match.group('rest')}DEFAULT {literal}"
            )

        return re.sub(
            r"(?P<lead>(?:\bADD(?:\s+COLUMN)?(?:\s+IF\s+NOT\s+EXISTS)?\s+|[,(]\s*))"
            r"(?P<name>\w+)(?P<rest>(?:(?!\bADD\b)[^,()])*?)"
            r"\bDEFAULT\s+(?P<value>[01])(?![\w.])",
            replace,
            text,
            flags=re.IGNORECASE,
        )

    def _rule_quoted_default(self, masked: MaskedSQL, text: str) -> str:
        # SQLite reads DEFAULT "open" as a string; PostgreSQL reads an identifier.
        def replace(match: "re.Match[str]") -> str:
            literal = masked.segment(match.group("token"))
            if literal is None or not literal.startswith('"'):
                return match.group(0)
            value = literal[1:-1].replace('""', '"').replace("'", "''")
            return f"DEFAULT '{value}'"

        return re.sub(
            r"\bDEFAULT\s+(?P<token>__rdb_mask_\d+__)",
            replace,
            text,
            flags=re.IGNORECASE,
        )

    def _rule_without_rowid(self, masked: MaskedSQL, text: str) -> str:
        return re.sub(r"\s*\bWITHOUT\s+ROWID\b", "", text, flags=re.IGNORECASE)


def number_placeholders(text: str) -> Tuple[str, int]:
    """
    Replace each ``?`` with ``$1``, ``$2``, ... from left to right.

    The caller is responsible for masking literals first.

    Returns:
        Tuple of (rewritten text, number of placeholders)
    """
    count = 0

    def replace(match: "re.Match[str]") -> str:
        nonlocal count
        count += 1
        return f"${count}"

    return re.sub(r"\?", replace, text), count


def split_statements(script: str) -> List[str]:
    """
    Split a script on semicolons that are outside literals and comments.

    Returns:
        Non-empty statements, stripped, without the trailing semicolon
    """
    masked = MaskedSQL(script)
    statements = []
    for part in masked.text.split(";"):
        statement = masked.unmask(part).strip()
        if _is_blank(statement):
            continue
        statements.append(statement)
    return statements


def _is_blank(statement: str) -> bool:
    stripped = _LEXEME.sub(
        lambda m: "" if m.lastgroup in ("line_comment", "block_comment") else m.group(0),
        statement,
    )
    return not stripped.strip()


_default_translator = SQLTranslator()


def get_translator() -> SQLTranslator:
    """Return the shared translator instance."""
    return _default_translator


def translate_schema(ddl: str) -> str:
    """Translate a SQLite DDL script to PostgreSQL with the shared translator."""
    return _default_translator.translate_schema(ddl)


def translate_query(
    query: str,
    params: Optional[Sequence[Any]] = None,
    dialect: Dialect = Dialect.POSTGRES,
) -> TranslatedStatement:
    """Translate one query with the shared translator."""
    return _default_translator.translate_query(query, params, dialect)


def rule_summary() -> Dict[str, str]:
    """Human readable description of the built-in rules, for the CLI and API."""
    return {
        "autoincrement": "INTEGER PRIMARY KEY [AUTOINCREMENT] -> SERIAL PRIMARY KEY",
        "datetime_now": "datetime('now') -> CURRENT_TIMESTAMP",
        "datetime_type": "DATETIME -> TIMESTAMP",
        "pragma": "PRAGMA statements removed",
        "boolean_default": "DEFAULT 0/1 -> DEFAULT false/true on boolean or untyped columns",
        "quoted_default": 'DEFAULT "text" -> DEFAULT \'text\'',
        "without_rowid": "WITHOUT ROWID removed",
    }
