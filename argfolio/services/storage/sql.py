# argfolio/services/storage/sql.py
"""
SQLAlchemy-backed document store.

All collections share the `documents` table (see models.Document). Each
call runs in its own short session and commits before returning, so a
put() is durable once it returns and concurrent upserts of the same id
simply overwrite each other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from argfolio.models import Document
from argfolio.services.exceptions import StorageError

logger = logging.getLogger(__name__)


class SqlDocumentStore:
    """
    Document store on a relational database.

    Args:
        session_factory: Callable returning a new Session (e.g. SessionLocal)
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list(self, collection: str) -> list[dict]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.id)
            ).all()
            return [dict(row.payload) for row in rows]

    def get(self, collection: str, record_id: str) -> dict | None:
        with self._session_factory() as db:
            row = db.get(Document, (collection, record_id))
            return dict(row.payload) if row is not None else None

    def put(self, collection: str, record: dict) -> None:
        self.put_many(collection, [record])

    def put_many(self, collection: str, records: list[dict]) -> int:
        """
        Upsert records by id in a single transaction.

        Raises:
            StorageError: If the transaction fails (nothing is written)
        """
        if not records:
            return 0

        # Last record wins when a batch repeats an id
        latest = {record["id"]: record for record in records}

        with self._session_factory() as db:
            try:
                for record_id, record in latest.items():
                    row = db.get(Document, (collection, record_id))
                    if row is None:
                        db.add(Document(collection=collection, id=record_id, payload=record))
                    else:
                        row.payload = record
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to store {len(records)} record(s) in {collection}: {e}")
                raise StorageError(f"Failed to write to '{collection}': {e}", collection=collection) from e

        logger.debug(f"Stored {len(records)} record(s) in {collection}")
        return len(records)

    def delete(self, collection: str, record_id: str) -> bool:
        with self._session_factory() as db:
            result = db.execute(
                delete(Document).where(
                    Document.collection == collection,
                    Document.id == record_id,
                )
            )
            db.commit()
            return result.rowcount > 0
