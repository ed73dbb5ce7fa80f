# app/data/database.py
from enum import Enum

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.utils.settings import DATABASE_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


class DatastoreState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class Datastore:
    """
    Owns the engine and the session factory.

    The app factory creates one instance, the lifespan connects and disposes it
    and request handlers receive it through dependencies, so readiness is
    always read from here and never from module globals.
    """

    def __init__(self, url: str | None = None):
        self.url = url or DATABASE_URL
        self.engine = create_engine(self.url, future=True, **self._engine_options(self.url))
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.state = DatastoreState.DISCONNECTED

    @staticmethod
    def _engine_options(url: str) -> dict:
        if url.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # in-memory sqlite has to share one connection between threads
                options["poolclass"] = StaticPool
            return options
        return {"pool_pre_ping": True, "pool_size": 10}

    @property
    def is_ready(self) -> bool:
        return self.state == DatastoreState.CONNECTED

    def connect(self) -> bool:
        # import models so they are registered in Base.metadata before create_all
        import app.data.models  # noqa: F401

        self.state = DatastoreState.CONNECTING
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            self.state = DatastoreState.DISCONNECTED
            logger.error(f"Database connection error: {e}")
            return False

        self.state = DatastoreState.CONNECTED
        logger.info(f"Database connected, tables: {list(Base.metadata.tables.keys())}")
        return True

    def check(self) -> bool:
        """Ping the database and refresh the state."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            if self.state == DatastoreState.CONNECTED:
                logger.warning(f"Database disconnected: {e}")
            self.state = DatastoreState.DISCONNECTED
            return False

        if self.state != DatastoreState.CONNECTED:
            logger.info("Database reachable again, reconnecting")
            return self.connect()
        return True

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self):
        self.state = DatastoreState.DISCONNECTING
        self.engine.dispose()
        self.state = DatastoreState.DISCONNECTED
        logger.info("Database connection closed")
