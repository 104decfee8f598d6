"""Async database access (SQLAlchemy + asyncpg)."""
