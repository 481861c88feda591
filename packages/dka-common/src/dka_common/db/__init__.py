"""
Database connection and ORM utilities for the DKA audit API.

This package provides async database connection management via SQLAlchemy,
ORM model definitions for PostgreSQL, and Alembic migration support.
"""

from dka_common.db.connection import (
    build_engine,
    build_session_factory,
    check_database_health,
)
from dka_common.db.orm_models import AuditRecordORM, Base, ImdDecileORM

__all__ = [
    "AuditRecordORM",
    "Base",
    "ImdDecileORM",
    "build_engine",
    "build_session_factory",
    "check_database_health",
]
