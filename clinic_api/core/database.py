from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Iterator, Optional
from .config import settings

def create_db_engine(database_url: str) -> Engine:
    """Create an engine with the isolation behaviour bookings rely on.

    SQLite only offers database-level write locking, so every transaction is
    opened with ``BEGIN IMMEDIATE``: the write lock is taken before the
    overlap check runs and concurrent bookings are serialized. pysqlite's own
    transaction handling is switched off so that SQLAlchemy emits BEGIN.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.SQLITE_BUSY_TIMEOUT,
            },
        )

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )

engine = create_db_engine(settings.get_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def unit_of_work(session: Session, isolation_level: Optional[str] = None) -> Iterator[Session]:
    """Run a block as one all-or-nothing transaction.

    Commits when the block finishes and rolls back on any exception. If the
    session is already inside a transaction the block runs in a savepoint and
    the outer commit stays with the caller.
    """
    if session.in_transaction():
        with session.begin_nested():
            yield session
        return

    with session.begin():
        if isolation_level:
            session.connection(execution_options={"isolation_level": isolation_level})
        yield session

# Database initialization
def init_db():
    """Initialize database tables."""
    # Import models so their tables are registered on Base.metadata
    from ..models import appointment, clinician, patient  # noqa: F401

    Base.metadata.create_all(bind=engine)
