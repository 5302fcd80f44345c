"""On-device key/value storage.

Everything the app persists (saved API key, analysis history, EmailJS
fallbacks) goes through a ``StoragePort`` so tests can swap the SQLite
table for a dict.
"""
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.orm import sessionmaker

from spinecheck.models.kv import KeyValue


class StoragePort(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqlStorage:
    """StoragePort backed by the ``key_values`` table."""

    def __init__(self, factory: sessionmaker):
        self._factory = factory

    def get(self, key: str) -> str | None:
        with self._factory() as session:
            row = session.get(KeyValue, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._factory() as session:
            row = session.get(KeyValue, key)
            if row is None:
                session.add(KeyValue(key=key, value=value, updated_at=now))
            else:
                row.value = value
                row.updated_at = now
            session.commit()

    def remove(self, key: str) -> None:
        with self._factory() as session:
            row = session.get(KeyValue, key)
            if row is not None:
                session.delete(row)
                session.commit()
