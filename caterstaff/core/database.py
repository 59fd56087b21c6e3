"""Database configuration and session management.

The engine is configured for SQLite by default:

    - **WAL (Write-Ahead Logging)**: the public confirmation page and the
      operator screens write to the same tables while the reminder job
      reads them. WAL lets readers proceed while a write is in progress.

    - **Foreign Keys**: disabled by default in SQLite. Enabled so that a
      ConfirmationRequest can never point at a missing session.

    - **check_same_thread=False**: FastAPI may hand a session to a worker
      thread other than the one that opened the connection.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from caterstaff.core.config import settings

connect_args = (
    {"check_same_thread": False}
    if settings.database_url.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    Pragmas are connection-level, so they are set every time the pool
    opens a new connection.
    """
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Import models so their tables are registered on the metadata
    import caterstaff.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
