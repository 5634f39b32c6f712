"""
Database Schema Initializer.

Run this script to create the refinement tables
(prompt_refinement_sessions, prompt_iterations, prompt_feedback)
in the database named by DATABASE_URL.

Usage:
    python -m prompt_refinement.scripts.db_init

Existing tables are left untouched.
"""

from sqlalchemy import inspect

from prompt_refinement.config import settings
from prompt_refinement.infrastructure.database.connection import build_engine, init_db
from prompt_refinement.infrastructure.database.tables import (
    FeedbackDBModel,
    IterationDBModel,
    SessionDBModel,
)

TABLES = [
    SessionDBModel.__tablename__,
    IterationDBModel.__tablename__,
    FeedbackDBModel.__tablename__,
]


def create_schema(database_url: str) -> list:
    """Creates any missing tables and returns the names it created."""
    print("Initializing Database Connection...")
    engine = build_engine(database_url)

    existing = set(inspect(engine).get_table_names())
    init_db(engine)

    created = [name for name in TABLES if name not in existing]
    for name in TABLES:
        print(f"--> {name}: {'created' if name in created else 'already present'}")

    engine.dispose()
    print("Schema initialization complete.")
    return created


if __name__ == "__main__":
    create_schema(settings.DATABASE_URL)
