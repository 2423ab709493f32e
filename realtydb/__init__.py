"""
realtydb

Database compatibility layer and migration tooling for the Blue Flag real
estate site, which started on an embedded SQLite file and moves to a hosted
PostgreSQL database.

Supports:
- Translating SQLite DDL and ``?`` placeholder queries for PostgreSQL
- A run/get/all facade over asyncpg and aiosqlite backends
- Exporting every SQLite table and importing it into PostgreSQL
- Creating and seeding the hosted schema
"""

__version__ = "0.1.0"
