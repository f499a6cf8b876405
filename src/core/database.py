"""Database connection and session management.

This module handles the database connection using SQLAlchemy. The session is
the entity store handle every manager works against.
"""

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker

from config import DATA_DIR, DATABASE_URL
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401
from models.student_profile import STUDENT_CODE_SEQUENCE, SequenceModel


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str):
    """Create an engine, applying the SQLite specific connection options."""
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection so every session sees the same in-memory DB
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        # Ensure data directory exists
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        engine = create_engine(url, connect_args={"check_same_thread": False})
    # SQLite leaves foreign keys unenforced unless every connection opts in
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Create missing tables and seed the counter rows."""
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    with bind.begin() as connection:
        seeded = connection.execute(
            select(SequenceModel.name).where(SequenceModel.name == STUDENT_CODE_SEQUENCE)
        ).first()
        if seeded is None:
            connection.execute(
                insert(SequenceModel).values(name=STUDENT_CODE_SEQUENCE, value=0)
            )


# Initialize DB (create tables if not exist)
init_db()


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
