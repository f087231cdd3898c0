"""
Database Session Management

Provides database connection pooling, session management and the
transaction scope used by every multi-write operation.
"""
from contextlib import contextmanager
from typing import Generator, List, Optional

from sqlalchemy import Engine, create_engine, event, exc, inspect, pool, text
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from src.buyerleads.exceptions import PersistenceError
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "echo": settings.database_echo,
        }
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_timeout": settings.database_pool_timeout,
        "pool_recycle": settings.database_pool_recycle,
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.database_echo,  # Log SQL queries if enabled
    }


# Create database engine with connection pooling
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))


@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """
    Event listener for new database connections.

    Logs connection establishment.
    """
    logger.debug("database_connection_established")


@event.listens_for(pool.Pool, "invalidate")
def receive_invalidate(dbapi_conn, connection_record, exception):
    """
    Event listener for connection invalidation.

    Logs when a connection is marked as invalid and removed from pool.
    """
    logger.warning(
        "database_connection_invalidated",
        exception=str(exception) if exception else None
    )


# Create session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Get database session with automatic cleanup.

    Usage:
        with get_db_session() as session:
            # Perform database operations
            result = session.query(Model).all()

    Yields:
        Database session

    Raises:
        Exception: Re-raises any exception after rollback
    """
    session = SessionLocal()
    try:
        logger.debug("database_session_created")
        yield session
        session.commit()
        logger.debug("database_session_committed")
    except Exception as e:
        session.rollback()
        logger.error(
            "database_session_rollback",
            error=str(e),
            error_type=type(e).__name__
        )
        raise
    finally:
        session.close()
        logger.debug("database_session_closed")


@contextmanager
def transaction(session: Session, operation: str) -> Generator[Session, None, None]:
    """
    Run a unit of work atomically on an existing session.

    Commits when the block completes; any exception rolls back every write
    made in the block. Store failures are re-raised as PersistenceError
    with the driver error chained; domain errors propagate unchanged.

    Usage:
        with transaction(session, "buyer_update"):
            repository.update(session, buyer_id, **fields)
            history.append(session, ...)

    Args:
        session: Database session
        operation: Name used in log events

    Yields:
        The same session
    """
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed", operation=operation)
    except exc.SQLAlchemyError as e:
        session.rollback()
        logger.error(
            "transaction_rollback",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__
        )
        raise PersistenceError(f"{operation} failed: database error") from e
    except Exception:
        session.rollback()
        logger.debug("transaction_aborted", operation=operation)
        raise


def health_check(session: Optional[Session] = None) -> bool:
    """
    Check database connection health.

    Args:
        session: Session to probe; a short-lived one is opened when omitted

    Returns:
        True if database is accessible, False otherwise
    """
    try:
        if session is None:
            with get_db_session() as own_session:
                own_session.execute(text("SELECT 1"))
        else:
            session.execute(text("SELECT 1"))
        logger.debug("database_health_check_success")
        return True
    except exc.SQLAlchemyError as e:
        if session is not None:
            session.rollback()
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return False


def close_connections():
    """
    Close all database connections and dispose of the engine.

    Should be called on application shutdown.
    """
    logger.info("closing_database_connections")
    engine.dispose()
    logger.info("database_connections_closed")


def create_all_tables(bind: Optional[Engine] = None) -> List[str]:
    """
    Create all database tables defined in models.

    WARNING: Use Alembic migrations instead in production.
    This is only for testing and initial setup.

    Args:
        bind: Engine to create tables on (defaults to the application engine)

    Returns:
        Sorted names of the tables present afterwards
    """
    from src.buyerleads.db.base import Base, import_all_models

    bind = bind or engine
    logger.info("creating_database_tables")

    import_all_models()
    Base.metadata.create_all(bind=bind, checkfirst=True)

    tables = sorted(inspect(bind).get_table_names())
    logger.info("database_tables_created", count=len(tables), tables=tables)
    return tables


def drop_all_tables(bind: Optional[Engine] = None):
    """
    Drop all database tables.

    WARNING: This will delete all data! Only use in development/testing.
    """
    from src.buyerleads.db.base import Base, import_all_models

    logger.warning("dropping_all_database_tables")

    import_all_models()
    Base.metadata.drop_all(bind=bind or engine)

    logger.warning("all_database_tables_dropped")
