"""
Schema creation.

Tables are created once, at startup, through a ``SchemaInitializer``. Callers
that arrive while the first initialization is running block on the same lock
and return once it has finished, so ``create_all`` never runs twice in a
process. A failed attempt leaves the barrier open and the next caller retries.
"""
import logging
import threading
from typing import Callable, Optional

from sqlalchemy.engine import Engine

from wagehire.db.base import Base
from wagehire.db.session import engine as default_engine

logger = logging.getLogger(__name__)


def create_tables(bind: Engine) -> None:
    # Register every model on Base.metadata
    import wagehire.db.models  # noqa: F401

    Base.metadata.create_all(bind=bind)


class SchemaInitializer:
    """One-time initialization barrier around schema creation."""

    def __init__(self, bind: Engine, initialize: Optional[Callable[[Engine], None]] = None):
        self.bind = bind
        self._initialize = initialize or create_tables
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def ready(self) -> bool:
        return self._done.is_set()

    def ensure(self) -> None:
        """Run the initialization exactly once; concurrent callers wait for it."""
        if self._done.is_set():
            return
        with self._lock:
            if self._done.is_set():
                return
            logger.info("Initializing database schema")
            self._initialize(self.bind)
            self._done.set()
            logger.info("Database schema ready")


schema_initializer = SchemaInitializer(default_engine)


def init_db() -> None:
    schema_initializer.ensure()


def reset_db(bind: Engine = default_engine) -> None:
    """Drop and recreate every table. Destroys all data."""
    import wagehire.db.models  # noqa: F401

    logger.warning("Dropping all tables")
    Base.metadata.drop_all(bind=bind)
    Base.metadata.create_all(bind=bind)
    logger.info("Database reset complete")
