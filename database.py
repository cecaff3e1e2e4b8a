"""
Database configuration and session management
Supports SQLite for local use and any SQLAlchemy backend through configuration
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from models.enums import SchemaMode
from shared.config import AppConfig
from shared.errors import ConfigurationError, StorageFailure
from shared.logging_utils import attach_sql_logging, setup_logging

logger = setup_logging("database")

Base = declarative_base()


def build_database_url(config: AppConfig) -> URL:
    """
    Build the SQLAlchemy URL from the configured URL, driver and credentials.
    Explicit username/password/driver settings replace those embedded in the URL.
    """
    try:
        url = make_url(config.db_url)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database URL: {config.db_url}") from e

    if config.db_driver:
        url = url.set(drivername=f"{url.get_backend_name()}+{config.db_driver}")
    if config.db_username:
        url = url.set(username=config.db_username)
    if config.db_password:
        url = url.set(password=config.db_password)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(url: URL, config: AppConfig) -> Engine:
    """Create SQLAlchemy engine with appropriate configuration"""
    if url.get_backend_name() == "sqlite":
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **engine_kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        logger.info("Using SQLite database engine")
    else:
        engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_size=config.pool_size,
            max_overflow=config.pool_size,
        )
        logger.info(f"Using {url.get_backend_name()} database engine with pool size {config.pool_size}")

    if config.show_sql:
        attach_sql_logging(engine, config.format_sql)
    return engine


class Database:
    """Engine, session factory and schema management for one storage backend."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.url = build_database_url(config)
        self.engine = create_database_engine(self.url, config)
        self.SessionLocal = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        self.check_connection()
        self.init_schema(config.schema_mode)

    def session(self) -> Session:
        """Open a new ORM session. The caller owns its lifetime."""
        return self.SessionLocal()

    def check_connection(self) -> None:
        """Run a trivial query to verify the backend is reachable."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database connection test failed: {e}")
            raise StorageFailure(f"Failed to connect to database: {e}") from e
        logger.info("Database connection test successful")

    def init_schema(self, mode: SchemaMode) -> None:
        """Create or recreate the tables according to the schema mode"""
        import models.database  # noqa: F401  registers the tables on Base.metadata

        if mode == SchemaMode.NONE:
            logger.info("Schema management disabled")
            return
        try:
            if mode == SchemaMode.CREATE:
                Base.metadata.drop_all(bind=self.engine)
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize database tables: {e}")
            raise StorageFailure(f"Failed to initialize database tables: {e}") from e
        logger.info(f"Database tables initialized (mode={mode.value})")

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()
        logger.info("Database connections closed")
