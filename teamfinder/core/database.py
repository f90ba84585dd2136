"""Database configuration and session management for SQLite.

This module configures the SQLite database engine with settings suited to
the confirmation workflow: WAL mode for concurrent access and foreign key
enforcement for data integrity.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while writing.
      Confirmation requests from both parties, the public story reader and
      the reconciliation job all hit the same file; without WAL every write
      would block every reader.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled for
      consistency with the rest of the marketplace schema. Listing
      references on completion records are plain indexed columns, since
      listings belong to another service and may disappear.

    - **check_same_thread=False**: Required for FastAPI. Sessions created by
      the dependency may be used from a different worker thread.

Atomic state transitions (a flag flipping false -> true, a record moving to
confirmed) are single guarded UPDATE statements, so SQLite's own write
serialization is the only synchronization the workflow needs.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from teamfinder.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
