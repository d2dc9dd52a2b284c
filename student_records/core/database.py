import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine, URL
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from .config import Settings
from .exceptions import StoreConnectionError, StoreError

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


# =============================================================================
# DATABASE ENGINE CONFIGURATION
# =============================================================================

def _connect_args(url: URL, timeout: int) -> dict:
    """Driver-level connect timeout; sqlite3 names the argument differently."""
    if url.get_backend_name() == "sqlite":
        return {"timeout": timeout}
    return {"connect_timeout": timeout}


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine used for every operation.

    NullPool means each checkout opens a brand-new DBAPI connection and each
    close really closes it: one connection per operation, nothing pooled.
    """
    url = settings.get_database_url()
    engine = create_engine(
        url,
        poolclass=NullPool,
        # SQL echo - useful for debugging
        echo=settings.DB_ECHO_SQL,
        connect_args=_connect_args(url, settings.DB_CONNECT_TIMEOUT),
    )

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_conn, connection_record):
        logger.debug("New database connection established")

    @event.listens_for(engine, "close")
    def receive_close(dbapi_conn, connection_record):
        logger.debug("Database connection closed")

    return engine


# =============================================================================
# CONSTRAINT ERROR CLASSIFICATION
# =============================================================================

PG_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062
SQLITE_UNIQUE_ERRORS = ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    Tell a uniqueness violation apart from other integrity failures
    (CHECK, NOT NULL) using the driver's structured error code.
    """
    orig = getattr(exc, "orig", None)
    if orig is None:
        return False

    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == PG_UNIQUE_VIOLATION

    # sqlite3 (Python 3.11+)
    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname is not None:
        return errorname in SQLITE_UNIQUE_ERRORS

    # PyMySQL / mysqlclient put the errno first in args
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        return args[0] == MYSQL_DUPLICATE_ENTRY

    return False


# =============================================================================
# CONNECTION PROVIDER
# =============================================================================

class Database:
    """
    Connection provider for the access layer.

    Built once at process start from Settings and passed into every
    student service call.
    """

    def __init__(self, settings: Settings, engine: Optional[Engine] = None):
        self.settings = settings
        self.engine = engine if engine is not None else build_engine(settings)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def get_connection(self) -> Connection:
        """Open a new connection or raise StoreConnectionError."""
        try:
            connection = self.engine.connect()
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to connect to database: {e}")
            raise StoreConnectionError(
                f"Cannot connect to database: {e}",
                details={"url": self.engine.url.render_as_string(hide_password=True)},
            ) from e
        logger.debug("Connection opened")
        return connection

    def close_connection(self, connection: Optional[Connection]) -> None:
        """
        Close a connection.

        Close failures are logged and swallowed so they never mask the
        outcome of the operation that used the connection.
        """
        if connection is None:
            return
        try:
            connection.close()
            logger.debug("Connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """
        Scoped connection for a single operation.

        Usage in services:
            with db.connection() as conn:
                conn.execute(stmt)
                conn.commit()

        The connection is closed on every exit path. Anything not committed
        is rolled back by the close.
        """
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.close_connection(conn)

    def test_connection(self) -> bool:
        """
        Check if database connection is working.

        Returns:
            bool: True if connection successful, False otherwise
        """
        try:
            with self.connection() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("✅ Database connection successful!")
            return True
        except (StoreConnectionError, SQLAlchemyError) as e:
            logger.error(f"❌ Database connection test failed: {e}")
            return False

    # =============================================================================
    # SCHEMA UTILITIES
    # =============================================================================

    def create_tables(self):
        """Create all tables defined in models that do not exist yet."""
        # Import models so Base.metadata knows about them
        from student_records.models import student  # noqa: F401

        logger.info("Creating database tables...")
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"❌ Error creating tables: {e}")
            raise StoreError(f"Cannot create tables: {e}") from e
        logger.info("✅ Database tables are ready!")

    def drop_tables(self):
        """Drop the students table and every row in it (test teardown)."""
        from student_records.models import student  # noqa: F401

        logger.warning("⚠️ Dropping the students table...")
        try:
            Base.metadata.drop_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"❌ Error dropping tables: {e}")
            raise StoreError(f"Cannot drop tables: {e}") from e

    def init_db(self):
        """
        Initialize database.
        Run this when starting the application, before the first query.
        """
        logger.info("Initializing database...")

        if not self.test_connection():
            raise StoreConnectionError("Cannot connect to database!")

        self.create_tables()
        logger.info("✅ Database initialized successfully!")

    def dispose(self):
        self.engine.dispose()
