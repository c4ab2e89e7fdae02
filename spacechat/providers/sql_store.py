from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from spacechat.models import KeyValueEntry
from spacechat.providers.base import KeyValueStore, StoreError


class SqlKeyValueStore(KeyValueStore):
    """
    Key-value store backed by a single SQLAlchemy table.
    Values are stored as JSON (JSONB on Postgres).
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[Any]:
        db = self._session_factory()
        try:
            row = db.get(KeyValueEntry, key)
            return row.value if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"get {key!r} failed: {e}") from e
        finally:
            db.close()

    def put(self, key: str, value: Any) -> None:
        db = self._session_factory()
        try:
            row = db.get(KeyValueEntry, key)
            if row:
                row.value = value
            else:
                row = KeyValueEntry(key=key, value=value)
            db.add(row)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"put {key!r} failed: {e}") from e
        finally:
            db.close()

    def list(self, prefix: str = "") -> list[str]:
        db = self._session_factory()
        try:
            stmt = select(KeyValueEntry.key).order_by(KeyValueEntry.key)
            if prefix:
                stmt = stmt.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
            return list(db.scalars(stmt))
        except SQLAlchemyError as e:
            raise StoreError(f"list {prefix!r} failed: {e}") from e
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(KeyValueEntry, key)
            if row:
                db.delete(row)
                db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"delete {key!r} failed: {e}") from e
        finally:
            db.close()
