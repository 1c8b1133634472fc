"""Database connection manager for the registration store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from studioreg.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine


class Database:
    """Database connection manager.

    Accepts a SQLite file path, ":memory:", or any SQLAlchemy URL
    (PostgreSQL in production). SQLite connections run in WAL mode with
    foreign keys enforced.
    """

    def __init__(self, database_url: str = "studioreg.db") -> None:
        """Initialize database connection.

        Args:
            database_url: SQLite file path, ":memory:" for an in-memory DB,
                or a full SQLAlchemy URL such as "postgresql+psycopg://...".
        """
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_sqlite(self) -> bool:
        """Whether the backing store is SQLite."""
        return "://" not in self.database_url or self.database_url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.database_url == ":memory:":
                # Share one connection across threads (TestClient runs in a thread)
                self._engine = create_engine(
                    "sqlite:///:memory:",
                    echo=False,
                    future=True,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            elif "://" not in self.database_url:
                Path(self.database_url).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_engine(
                    f"sqlite:///{self.database_url}",
                    echo=False,
                    future=True,
                    connect_args={"check_same_thread": False, "timeout": 30},
                )
            else:
                self._engine = create_engine(
                    self.database_url,
                    echo=False,
                    future=True,
                    pool_pre_ping=True,
                )

            if self.is_sqlite:

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled (SQLite only).

        Returns:
            True if WAL mode is enabled.
        """
        if not self.is_sqlite:
            return False
        with self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            mode = result.scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
