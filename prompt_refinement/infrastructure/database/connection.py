"""
Database Connection Manager.

This module handles the low-level details of connecting to the relational store.
It builds the SQLModel engine which is handed to the Unit of Work.
"""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# Registers the tables on SQLModel.metadata
from . import tables  # noqa: F401


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Creates the engine for the given URL.

    postgresql:// URLs are routed to the psycopg 3 driver. In-memory SQLite
    shares a single connection so every session sees the same database.
    """
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    # echo=False in production to avoid leaking sensitive data in logs
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def init_db(engine: Engine):
    """
    Idempotent initialization.
    Creates tables if they do not exist.
    """
    SQLModel.metadata.create_all(engine)
