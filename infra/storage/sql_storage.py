from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, delete, insert, select, update
from sqlalchemy.engine import Engine

from learning.storage import KeyValueStorage


@dataclass
class SqlKeyValueStorage(KeyValueStorage):
    """
    SQLAlchemy-backed KeyValueStorage: one two-column table.

    - Defaults to a local SQLite file, so records survive restarts.
    - Any SQLAlchemy URL works; the table is created on first use.
    """

    url: str = "sqlite:///./progress_store.db"
    table_name: str = "kv_store"

    _engine: Any = None
    _table: Any = None

    def _get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(self.url)
        return self._engine

    def _get_table(self) -> Table:
        if self._table is not None:
            return self._table
        metadata = MetaData()
        self._table = Table(
            self.table_name,
            metadata,
            Column("key", String(255), primary_key=True),
            Column("value", Text, nullable=False),
        )
        metadata.create_all(self._get_engine())
        return self._table

    def get(self, key: str) -> Optional[str]:
        table = self._get_table()
        with self._get_engine().connect() as conn:
            row = conn.execute(select(table.c.value).where(table.c.key == key)).first()
        return row[0] if row is not None else None

    def set(self, key: str, value: str) -> None:
        table = self._get_table()
        with self._get_engine().begin() as conn:
            result = conn.execute(update(table).where(table.c.key == key).values(value=value))
            if result.rowcount == 0:
                conn.execute(insert(table).values(key=key, value=value))

    def delete(self, key: str) -> None:
        table = self._get_table()
        with self._get_engine().begin() as conn:
            conn.execute(delete(table).where(table.c.key == key))

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
