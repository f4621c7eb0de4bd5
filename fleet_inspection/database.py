# fleet_inspection/database.py
"""
Database engine factory, session management, unit of work, and table creation.
Uses SQLAlchemy. The engine is owned by the application entry point (main.py
startup/shutdown); services only ever receive a Session.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker

from fleet_inspection.errors import ConflictError, StorageError
from fleet_inspection.utils.logger import get_logger

logger = get_logger(__name__)

# Bound to an engine by configure_session_factory() at startup
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

Base = declarative_base()


def build_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for the given URL. SQLite connections get foreign keys enforced."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)   # Auto-reconnect if DB connection drops
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 20)

    engine = create_engine(url, echo=echo, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def configure_session_factory(engine: Engine) -> None:
    SessionLocal.configure(bind=engine)


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """
    Scope a multi-statement write. Commits when the block exits cleanly,
    rolls back on every other exit path. Storage constraint violations
    surface as ConflictError, other database failures as StorageError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[DB] Constraint violation rolled back: {e.orig}")
        raise ConflictError("Operation conflicts with existing data") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[DB] Storage failure rolled back: {e}", exc_info=True)
        raise StorageError("Database operation failed") from e
    except Exception:
        db.rollback()
        raise


def create_tables(engine: Engine):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from fleet_inspection.models.driver import Driver                          # noqa
    from fleet_inspection.models.vehicle import Vehicle                        # noqa
    from fleet_inspection.models.vehicle_set import VehicleSet, VehicleSetSlot  # noqa
    from fleet_inspection.models.inspection_request import (                   # noqa
        InspectionRequest, InspectionPhoto,
    )

    Base.metadata.create_all(bind=engine)
