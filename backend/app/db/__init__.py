"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - Single async engine per process, owned by the relational store
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
