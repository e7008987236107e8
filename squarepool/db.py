"""Engine and session factory shared by the sync tool and grid readers.

Nothing connects at import time: ``SessionLocal`` stays unbound until
``configure_engine`` is called with the loaded database URL.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)


def configure_engine(database_url: str) -> Engine:
    engine = create_engine(database_url, pool_pre_ping=True)
    SessionLocal.configure(bind=engine)
    return engine
