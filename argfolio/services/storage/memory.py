# argfolio/services/storage/memory.py
"""In-process document store, used by tests and DOCUMENT_STORE=memory."""

from __future__ import annotations

import copy
import logging
import threading

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """
    Thread-safe dict-of-dicts document store.

    Records are deep-copied on the way in and out so callers can never
    mutate stored state by accident.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict]] = {}
        self._lock = threading.Lock()

    def list(self, collection: str) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._collections.get(collection, {}).values()]

    def get(self, collection: str, record_id: str) -> dict | None:
        with self._lock:
            record = self._collections.get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def put(self, collection: str, record: dict) -> None:
        record_id = record["id"]
        with self._lock:
            self._collections.setdefault(collection, {})[record_id] = copy.deepcopy(record)
        logger.debug(f"Stored {collection}/{record_id}")

    def put_many(self, collection: str, records: list[dict]) -> int:
        with self._lock:
            bucket = self._collections.setdefault(collection, {})
            for record in records:
                bucket[record["id"]] = copy.deepcopy(record)
        return len(records)

    def delete(self, collection: str, record_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(record_id, None) is not None
