from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings
import logging
import math
import time

logger = logging.getLogger(__name__)

logger.info("DOXA DATABASE_URL = %s", settings.get_masked_database_url())


def _null_safe(fn):
    def wrapper(*args):
        if any(arg is None for arg in args):
            return None
        return fn(*args)
    return wrapper


# SQLite ships without the math functions and its lower() is ASCII-only; the
# distance expression and case-insensitive matching rely on these.
SQLITE_FUNCTIONS = {
    "sin": (1, math.sin),
    "cos": (1, math.cos),
    "asin": (1, lambda x: math.asin(min(1.0, x))),
    "sqrt": (1, math.sqrt),
    "radians": (1, math.radians),
    "power": (2, math.pow),
    "lower": (1, str.lower),
}


def register_sqlite_functions(target: Engine) -> None:
    """Register the functions the catalog queries need on a SQLite engine."""

    @event.listens_for(target, "connect")
    def _on_connect(dbapi_connection, connection_record):
        for name, (num_args, fn) in SQLITE_FUNCTIONS.items():
            dbapi_connection.create_function(name, num_args, _null_safe(fn), deterministic=True)


# Create engine with connection pooling and pre-ping to verify connections
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using them
    echo=False,  # Keep echo off - we'll log slow queries separately
    connect_args={"check_same_thread": False} if settings.is_sqlite else {},
)

if settings.is_sqlite:
    register_sqlite_functions(engine)

# Add slow query logging (DEBUG mode only)
if settings.DEBUG:
    SLOW_QUERY_THRESHOLD_MS = 200.0

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        """Store query start time before execution."""
        context._query_start_time = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        """Log slow queries after execution."""
        if hasattr(context, "_query_start_time"):
            elapsed_ms = (time.perf_counter() - context._query_start_time) * 1000
            if elapsed_ms >= SLOW_QUERY_THRESHOLD_MS:
                # Get first line of statement for brevity
                statement_first_line = statement.split("\n")[0].strip()[:100]
                logger.warning(
                    f"SLOW_QUERY: {elapsed_ms:.2f}ms - {statement_first_line}"
                )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Dev convenience: ensure the monasteries table exists.

    The catalog schema is owned by the platform's migration tooling; create_all()
    only creates missing tables and never alters existing ones.
    """
    # Import all models to ensure they're registered with Base.metadata
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
