# barbershop/db.py

import threading
from contextlib import contextmanager

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

# In-memory SQLite: the fallback store lives and dies with the process
LOCAL_DATABASE_URL = "sqlite://"


class LocalStore:
    """Process-local record storage used when the spreadsheet is unavailable.

    Nothing here is persisted. Build one at startup and hand it to the
    record store; a restart (or ``clear()``) starts from empty tables.
    """

    def __init__(self):
        self.engine = create_engine(
            LOCAL_DATABASE_URL,
            echo=False,
            connect_args={"check_same_thread": False},  # background tasks run in a threadpool
            poolclass=StaticPool,
        )
        self._lock = threading.RLock()
        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self):
        with self._lock, Session(self.engine, expire_on_commit=False) as session:
            yield session

    def clear(self):
        with self._lock:
            SQLModel.metadata.drop_all(self.engine)
            SQLModel.metadata.create_all(self.engine)
