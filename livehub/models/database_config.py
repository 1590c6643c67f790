"""
Database configuration and session management for Live Hub.
"""

from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def normalize_database_url(database_url):
    """Fix Heroku-style Postgres URLs for SQLAlchemy"""
    if database_url and database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    return database_url


def build_engine(database_url):
    """Create an engine for the given URL, sharing one connection for in-memory SQLite"""
    database_url = normalize_database_url(database_url)

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    return create_engine(
        database_url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300
    )


def init_db(engine):
    """Initialize database tables"""
    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory):
    """Context manager for database sessions with automatic commit/rollback"""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
