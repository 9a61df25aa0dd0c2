"""SQLite cache connections.

One engine and one session factory per cache file, shared by the API
request threads and the CLI.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from elokline.core.config import DEFAULT_DB_PATH
from elokline.db.schema import Base


def resolve_db_path(db_path: Path | str | None) -> Path:
    """Absolute cache path, falling back to the default location."""
    return Path(db_path if db_path is not None else DEFAULT_DB_PATH).resolve()


# Resolved cache path -> session factory; the factory carries its engine
_factories: dict[Path, sessionmaker] = {}


def _session_factory_for(path: Path) -> sessionmaker:
    factory = _factories.get(path)
    if factory is None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Request threads share a single SQLite connection
        engine = create_engine(
            f"sqlite:///{path}",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        factory = _factories[path] = sessionmaker(bind=engine)
    return factory


def get_engine(db_path: Path | str | None = None) -> Engine:
    """Engine for a cache file, created on first use."""
    return _session_factory_for(resolve_db_path(db_path)).kw["bind"]


def get_session(db_path: Path | str | None = None) -> Session:
    """Open a session on the cache. The caller closes it."""
    return _session_factory_for(resolve_db_path(db_path))()


@contextmanager
def get_db_session(db_path: Path | str | None = None) -> Generator[Session, None, None]:
    """Session scope for scripts.

    Commits when the block exits normally and rolls back if it raises.
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | str | None = None) -> None:
    """Create missing cache tables."""
    Base.metadata.create_all(get_engine(db_path))
