"""
Database Connection and Session Management
Uses SQLite (aiosqlite) by default, PostgreSQL when DATABASE_URL points at one
"""

import logging

from databases import Database
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base
from app.config import settings

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

# Pool sizing only applies to server backends; sqlite connections take no pool options
if DATABASE_URL.startswith("sqlite"):
    db_options = {}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Create database instance for async queries
database = Database(DATABASE_URL, **db_options)

# Create SQLAlchemy engine for table creation
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        DATABASE_URL.replace("postgresql://", "postgresql+psycopg2://")
        if "postgresql://" in DATABASE_URL else DATABASE_URL
    )

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


def row_to_dict(row) -> dict:
    """Convert a `databases` record into a plain dict"""
    return dict(row._mapping)


def create_tables():
    """Create all tables registered on the metadata (no-op when present)"""
    import app.models  # noqa: F401  registers the tables

    metadata.create_all(engine)


async def connect_db():
    """Connect to database on startup"""
    create_tables()
    await database.connect()
    logger.info("[OK] Database connected")


async def disconnect_db():
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("[OK] Database disconnected")
