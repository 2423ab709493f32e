"""Tests for dialect-aware query compilation."""

import pytest

from realtydb.models.schema import Dialect, PlaceholderStyle
from realtydb.services.query_builder import InsertQuery, SelectQuery, batched, quote_identifier


class TestQuoteIdentifier:
    """Tests for identifier quoting."""

    def test_plain_names_stay_bare(self):
        """Test camelCase names are left unquoted so they fold like the schema."""
        assert quote_identifier("isPublished") == "isPublished"
        assert quote_identifier("blog_images") == "blog_images"

    def test_reserved_words_quoted(self):
        assert quote_identifier("user") == '"user"'
        assert quote_identifier("order") == '"order"'

    def test_odd_names_quoted_and_escaped(self):
        assert quote_identifier("odd name") == '"odd name"'
        assert quote_identifier('we"ird') == '"we""ird"'


class TestInsertQuery:
    """Tests for multi-row INSERT compilation."""

    def test_postgres_numbered_placeholders(self):
        query = InsertQuery(
            "users",
            ["email", "isAdmin"],
            [("a@x", True), ("b@x", False)],
            on_conflict_do_nothing=True,
        )
        statement = query.compile(Dialect.POSTGRES)
        assert statement.sql == (
            "INSERT INTO users (email, isAdmin) VALUES ($1, $2), ($3, $4) ON CONFLICT DO NOTHING"
        )
        assert statement.params == ("a@x", True, "b@x", False)
        assert statement.placeholder_count == 4
        assert statement.style == PlaceholderStyle.NUMERIC

    def test_sqlite_question_marks(self):
        query = InsertQuery("users", ["email", "isAdmin"], [("a@x", 1), ("b@x", 0)])
        statement = query.compile(Dialect.SQLITE)
        assert statement.sql == "INSERT INTO users (email, isAdmin) VALUES (?, ?), (?, ?)"
        assert statement.style == PlaceholderStyle.QMARK

    def test_returning(self):
        statement = InsertQuery("blogs", ["title"], [("Hi",)], returning="id").compile(Dialect.POSTGRES)
        assert statement.sql.endswith("RETURNING id")

    def test_requires_rows(self):
        with pytest.raises(ValueError):
            InsertQuery("users", ["email"], []).compile(Dialect.POSTGRES)

    def test_row_width_must_match_columns(self):
        with pytest.raises(ValueError, match="columns"):
            InsertQuery("users", ["email", "role"], [("a@x",)]).compile(Dialect.POSTGRES)


class TestSelectQuery:
    """Tests for SELECT compilation."""

    def test_filters_order_and_paging(self):
        query = SelectQuery(
            "blogs",
            where={"isPublished": True, "deletedAt": None},
            order_by=["createdAt DESC"],
            limit=10,
            offset=20,
        )
        statement = query.compile(Dialect.POSTGRES)
        assert statement.sql == (
            "SELECT * FROM blogs WHERE isPublished = $1 AND deletedAt IS NULL "
            "ORDER BY createdAt DESC LIMIT $2 OFFSET $3"
        )
        assert statement.params == (True, 10, 20)

    def test_rowid_order_passes_through(self):
        statement = SelectQuery("blogs", columns=["id", "title"], order_by=["rowid"]).compile(Dialect.SQLITE)
        assert statement.sql == "SELECT id, title FROM blogs ORDER BY rowid"


def test_batched():
    assert batched([1, 2, 3, 4, 5], 2) == [(0, [1, 2]), (2, [3, 4]), (4, [5])]
    assert batched([], 3) == []
