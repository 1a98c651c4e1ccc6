"""
Redis record store for article and news source records.

Each record is a Redis hash keyed by ``<table>:<sha256(primary key)>``. Every
hash field holds one JSON-encoded record attribute, so a single attribute can be
written with one HSET without reading or touching the others.
"""

import hashlib
import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

import redis

from .config import get_redis_client
from .errors import StoreError

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Key-value primitives the pipeline needs from a backing store."""

    def get(self, table: str, key: str) -> Optional[Dict[str, Any]]: ...

    def put(self, table: str, key: str, item: Dict[str, Any]) -> None: ...

    def update(self, table: str, key: str, field: str, value: Any) -> None: ...

    def delete(self, table: str, key: str) -> None: ...

    def scan(self, table: str) -> List[Dict[str, Any]]: ...

    def scan_page(self, table: str, cursor: int, count: int) -> Tuple[int, List[Dict[str, Any]]]: ...


@contextmanager
def _store_errors(action: str, table: str, key: Optional[str] = None) -> Iterator[None]:
    """Translate redis failures (timeouts included) into StoreError."""
    try:
        yield
    except redis.RedisError as e:
        target = f"{table}/{key}" if key is not None else table
        logger.error(f"ERROR: Redis {action} failed for {target}: {e}")
        raise StoreError(f"{action} failed for {target}: {e}") from e


class RedisRecordStore:
    """Redis-backed implementation of the record store."""

    def __init__(self, client: Optional[redis.Redis] = None):
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    @staticmethod
    def _generate_record_key(table: str, key: str) -> str:
        """
        Generate a consistent, safe Redis key for a record.
        Uses SHA256 hash to ensure clean keys regardless of URL complexity.

        Args:
            table: The logical table name, used as key prefix
            key: The record's primary key

        Returns:
            Redis key in format: <table>:<hash>
        """
        key_hash = hashlib.sha256(key.encode('utf-8')).hexdigest()
        return f"{table}:{key_hash}"

    @staticmethod
    def _decode(raw: Dict[str, str]) -> Optional[Dict[str, Any]]:
        if not raw:
            return None
        return {field: json.loads(value) for field, value in raw.items()}

    def get(self, table: str, key: str) -> Optional[Dict[str, Any]]:
        """Return the record, or None when it does not exist."""
        with _store_errors("get", table, key):
            raw = self.client.hgetall(self._generate_record_key(table, key))
        return self._decode(raw)

    def put(self, table: str, key: str, item: Dict[str, Any]) -> None:
        """
        Write the given attributes of a record.

        Attributes not present in ``item`` are left as they are, so applying the
        same put twice yields the same record.
        """
        mapping = {field: json.dumps(value) for field, value in item.items()}
        with _store_errors("put", table, key):
            self.client.hset(self._generate_record_key(table, key), mapping=mapping)
        logger.debug(f"Stored {table} record: {key}")

    def update(self, table: str, key: str, field: str, value: Any) -> None:
        """Set exactly one attribute of a record."""
        with _store_errors("update", table, key):
            self.client.hset(self._generate_record_key(table, key), field, json.dumps(value))
        logger.debug(f"Updated {table} record {key}: set {field}")

    def delete(self, table: str, key: str) -> None:
        """Delete a record. Deleting a missing record is not an error."""
        with _store_errors("delete", table, key):
            self.client.delete(self._generate_record_key(table, key))

    def scan(self, table: str) -> List[Dict[str, Any]]:
        """Return every record of a table. Unbounded; prefer scan_page for large tables."""
        items = []
        with _store_errors("scan", table):
            # SCAN may return a key more than once while the keyspace rehashes
            redis_keys = set(self.client.scan_iter(match=f"{table}:*"))
            for redis_key in sorted(redis_keys):
                record = self._decode(self.client.hgetall(redis_key))
                if record is not None:
                    items.append(record)
        return items

    def scan_page(self, table: str, cursor: int = 0, count: int = 100) -> Tuple[int, List[Dict[str, Any]]]:
        """
        Return one SCAN page of a table.

        Args:
            table: The logical table name
            cursor: Cursor returned by the previous page, 0 to start
            count: Page size hint passed to SCAN

        Returns:
            The next cursor (0 once the scan is complete) and the page's records
        """
        with _store_errors("scan", table):
            next_cursor, redis_keys = self.client.scan(cursor=cursor, match=f"{table}:*", count=count)
            items = []
            for redis_key in dict.fromkeys(redis_keys):
                record = self._decode(self.client.hgetall(redis_key))
                if record is not None:
                    items.append(record)
        return int(next_cursor), items

    def health_check(self) -> bool:
        """
        Check if Redis is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            self.client.ping()
            logger.debug("Record store health check: OK")
            return True
        except redis.RedisError as e:
            logger.error(f"ERROR: Record store health check failed: {e}")
            return False
