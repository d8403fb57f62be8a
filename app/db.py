"""SQLAlchemy engine, session factory and FastAPI dependency for the app database."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.infra.logging_config import get_logger

logger = get_logger("db")

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets thread sharing and foreign keys enabled."""
    kwargs: dict = {"pool_pre_ping": True}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        else:
            db_path = Path(database_url.replace("sqlite:///", "", 1))
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    engine = create_engine(database_url, **kwargs)

    if is_sqlite:

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class DatabaseManager:
    """Lazily builds the engine and hands out sessions."""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self._database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            url = self._database_url or get_settings().database_url
            self._engine = build_engine(url)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                autocommit=False, autoflush=False, bind=self.engine
            )
        return self._session_factory

    @contextmanager
    def db_session(self) -> Generator[Session, None, None]:
        """Context manager yielding a session that is always closed."""
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()


db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding an app database session."""
    with db_manager.db_session() as db:
        yield db


def init_db(engine: Optional[Engine] = None) -> None:
    """Create tables and seed the global kill switch when absent."""
    import app.models  # noqa: F401 - register models on Base.metadata
    from app.services.setting_service import SettingService

    engine = engine or db_manager.engine
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as db:
        SettingService(db).seed_auto_response_enabled(
            get_settings().auto_response_default_enabled
        )
    logger.info("Database tables ready")
