# backend/database.py
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def create_memory_engine():
    """Private in-memory SQLite database; lives as long as the engine does."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def create_session_factory(engine=None):
    engine = engine or create_memory_engine()
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class SessionScope:
    """
    Hands out sessions one at a time. Every session shares the single
    in-memory connection, so a session must not overlap with another
    (request threads and the scheduler's sweep included).
    """

    def __init__(self, session_factory=None):
        self.SessionLocal = session_factory or create_session_factory()
        self.lock = threading.RLock()

    @contextmanager
    def __call__(self):
        with self.lock:
            db = self.SessionLocal()
            try:
                yield db
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()
