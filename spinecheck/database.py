import os

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from spinecheck.config import settings


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _sqlite_path(url: str) -> str | None:
    """File path of a SQLite URL, None for in-memory databases."""
    database = make_url(url).database
    if not database or database == ":memory:":
        return None
    return database


def build_engine(url: str):
    engine_kwargs: dict = {"echo": False}
    if _is_sqlite(url):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        path = _sqlite_path(url)
        if path is None:
            # one shared connection, otherwise every thread sees its own empty db
            engine_kwargs["poolclass"] = StaticPool
        elif os.path.dirname(path):
            os.makedirs(os.path.dirname(path), exist_ok=True)
    else:
        engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

    return create_engine(url, **engine_kwargs)


class Base(DeclarativeBase):
    pass


engine = build_engine(settings.database_url)
session_factory = sessionmaker(engine, expire_on_commit=False)


def create_tables(bind=None) -> None:
    from spinecheck.models import kv  # noqa: F401
    Base.metadata.create_all(bind or engine)
