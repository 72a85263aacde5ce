"""Base database class with common connection logic."""

from pathlib import Path

from loguru import logger
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

MEMORY_PATH = ":memory:"


class BaseDatabase:
    """Base database class with common connection logic.

    Every connection runs with foreign keys enforced and, for file
    databases, WAL journaling. An in-memory database shares one connection
    so all sessions see the same data.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file or ":memory:" for in-memory DB
        """
        self.db_path = str(db_path)
        self.in_memory = self.db_path == MEMORY_PATH

        engine_kwargs: dict = {
            "connect_args": {"check_same_thread": False},
            "echo": False,
        }
        if self.in_memory:
            engine_kwargs["poolclass"] = StaticPool
        else:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(f"sqlite:///{self.db_path}", **engine_kwargs)
        event.listen(self.engine, "connect", self._configure_connection)
        self._create_schema()
        logger.info(f"Database initialised: {self.db_path}")

    def _configure_connection(self, dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        if not self.in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    def _create_schema(self) -> None:
        """Create database tables if they don't exist."""
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Note:
            Caller is responsible for committing, rolling back on error,
            and closing the session.
        """
        return Session(self.engine)

    def close(self) -> None:
        """Dispose of the database engine."""
        if self.engine:
            self.engine.dispose()
            logger.info(f"Database connection closed: {self.db_path}")

    def __enter__(self) -> "BaseDatabase":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
