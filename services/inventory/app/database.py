"""
Database configuration and session management for the Inventory service.

This module sets up the database connection using SQLAlchemy and provides
the session factory the data source opens its sessions from.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings


def build_engine(database_url: str):
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections are shared across the worker threads used for lookups,
    and an in-memory database must keep a single connection to stay alive.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


# Create SQLAlchemy engine from settings
# Create SessionLocal class for database sessions
# Base class for declarative models
DATABASE_URL = get_settings().DATABASE_URL
engine       = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base         = declarative_base()
