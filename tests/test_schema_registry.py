"""Tests for table ordering."""

import logging

from realtydb.models.migration import TableOrder
from realtydb.models.schema import ColumnDescriptor, ForeignKey, TableDescriptor
from realtydb.services.schema_registry import SchemaRegistry


def table(name, position, *references):
    return TableDescriptor(
        name=name,
        columns=[ColumnDescriptor("id", "INTEGER", primary_key=True)],
        foreign_keys=[ForeignKey(column=f"{ref}Id", referenced_table=ref, referenced_column="id") for ref in references],
        position=position,
    )


class TestSchemaRegistry:
    """Tests for SchemaRegistry."""

    def test_declared_order(self):
        registry = SchemaRegistry([table("blogs", 2), table("users", 0), table("blog_images", 1, "blogs")])
        assert registry.list_tables() == ["users", "blog_images", "blogs"]
        assert [t.name for t in registry.ordered(TableOrder.DECLARED)] == ["users", "blog_images", "blogs"]

    def test_dependency_order_puts_parents_first(self):
        registry = SchemaRegistry([table("users", 0), table("blog_images", 1, "blogs"), table("blogs", 2)])
        assert [t.name for t in registry.dependency_order()] == ["users", "blogs", "blog_images"]

    def test_dependency_order_keeps_declared_order_when_free(self):
        registry = SchemaRegistry([table("c", 0), table("a", 1), table("b", 2)])
        assert [t.name for t in registry.ordered(TableOrder.DEPENDENCY)] == ["c", "a", "b"]

    def test_self_reference_ignored(self):
        registry = SchemaRegistry([table("categories", 0, "categories"), table("posts", 1, "categories")])
        assert [t.name for t in registry.dependency_order()] == ["categories", "posts"]

    def test_unknown_reference_ignored(self):
        registry = SchemaRegistry([table("orphans", 0, "missing")])
        assert [t.name for t in registry.dependency_order()] == ["orphans"]

    def test_cycle_is_broken_in_declared_order(self, caplog):
        registry = SchemaRegistry([table("a", 0, "b"), table("b", 1, "a"), table("c", 2)])
        with caplog.at_level(logging.WARNING):
            order = [t.name for t in registry.dependency_order()]
        assert order == ["c", "a", "b"]
        assert "cycle" in caplog.text

    def test_dependents_of(self):
        registry = SchemaRegistry([
            table("blogs", 0),
            table("blog_images", 1, "blogs"),
            table("blog_videos", 2, "blogs"),
        ])
        assert registry.dependents_of("blogs") == ["blog_images", "blog_videos"]
        assert registry.get_table("nope") is None
