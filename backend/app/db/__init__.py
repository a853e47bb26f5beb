"""Database Declarations — SQLAlchemy Base and shared column helpers.

Invariants:
    - Single async engine per process (initialized via init_db)
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
