# plpgen/lib/kv_store.py
"""
Key-value storage for wizard sessions, auth flags and the VIP list.

Values are strings (callers JSON-encode what they need). Keys written with
a TTL disappear once it elapses; keys written without one live until
deleted.
"""
import asyncio
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from plpgen.core.exceptions import StoreError
from plpgen.core.logging import log

# Seconds between opportunistic sweeps in MemoryKeyValueStore.put
SWEEP_INTERVAL = 60.0


class KeyValueStore:
    """Interface shared by the in-memory and MongoDB stores."""

    name = "abstract"

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class MemoryKeyValueStore(KeyValueStore):
    """
    Process-local store.

    - Expiry is checked lazily on read; put() also drops every expired key,
      at most once per sweep_interval.
    - Safe for concurrent tasks on one event loop.
    """

    name = "memory"

    def __init__(self, clock=time.monotonic, sweep_interval: float = SWEEP_INTERVAL) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        # key -> (value, expires_at or None)
        self._items: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at is not None and expires_at <= self._clock():
                del self._items[key]
                return None
            return value

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        now = self._clock()
        expires_at = now + ttl_seconds if ttl_seconds else None
        async with self._lock:
            self._items[key] = (value, expires_at)
            if now >= self._next_sweep:
                self._drop_expired(now)
                self._next_sweep = now + self._sweep_interval

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._items.pop(key, None)

    async def sweep_expired(self) -> int:
        """Drop expired keys; returns how many were removed."""
        async with self._lock:
            return self._drop_expired(self._clock())

    def _drop_expired(self, now: float) -> int:
        expired = [k for k, (_, exp) in self._items.items() if exp is not None and exp <= now]
        for k in expired:
            del self._items[k]
        if expired:
            log("STORE", f"Swept {len(expired)} expired key(s)")
        return len(expired)


class MongoKeyValueStore(KeyValueStore):
    """
    MongoDB-backed store (motor).

    Documents look like {_id: key, value: str, expires_at: datetime | None}.
    A TTL index lets MongoDB purge expired documents; reads also filter them
    because the TTL monitor only runs about once a minute.
    """

    name = "mongodb"

    def __init__(self, collection) -> None:
        self._collection = collection

    async def ensure_indexes(self) -> None:
        await self._collection.create_index("expires_at", expireAfterSeconds=0)

    async def get(self, key: str) -> Optional[str]:
        try:
            doc = await self._collection.find_one({"_id": key})
        except Exception as e:
            raise StoreError(f"KV get failed for {key}: {e}") from e
        if not doc:
            return None
        expires_at = doc.get("expires_at")
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at <= datetime.now(timezone.utc):
                return None
        return doc.get("value")

    async def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        try:
            await self._collection.replace_one(
                {"_id": key},
                {"_id": key, "value": value, "expires_at": expires_at},
                upsert=True,
            )
        except Exception as e:
            raise StoreError(f"KV put failed for {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._collection.delete_one({"_id": key})
        except Exception as e:
            raise StoreError(f"KV delete failed for {key}: {e}") from e

    async def close(self) -> None:
        client = getattr(self._collection.database, "client", None)
        if client is not None:
            client.close()
            log("STORE", "MongoDB client closed")
