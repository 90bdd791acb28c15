# plpgen/db/__init__.py
"""
Database module.

The active KeyValueStore lives here. Without MONGODB_URL (or when MongoDB
cannot be reached) an in-memory store is used, which is fine for a single
worker but loses sessions and the VIP list on restart.
"""
from typing import Optional

from plpgen.core.config import StoreSettings, settings
from plpgen.core.logging import log
from plpgen.lib.kv_store import KeyValueStore, MemoryKeyValueStore, MongoKeyValueStore

_store: KeyValueStore = MemoryKeyValueStore()
_connection_error: Optional[str] = None


async def connect_db(store_settings: Optional[StoreSettings] = None) -> KeyValueStore:
    """
    Connect to MongoDB if configured.

    If MongoDB is not available, stores the error for later retrieval
    and keeps the in-memory store.
    """
    global _store, _connection_error
    cfg = store_settings or settings.store

    if not cfg.mongodb_url:
        log("STORE", "MONGODB_URL not set, using in-memory store")
        return _store

    client = None
    try:
        from motor.motor_asyncio import AsyncIOMotorClient

        client = AsyncIOMotorClient(cfg.mongodb_url, serverSelectionTimeoutMS=5000)
        # Test connection - this will fail fast if MongoDB is not running
        await client.admin.command("ping")

        mongo_store = MongoKeyValueStore(client[cfg.database][cfg.collection])
        await mongo_store.ensure_indexes()
        _store = mongo_store
        _connection_error = None
        log("STORE", f"✅ Connected to MongoDB ({cfg.database}.{cfg.collection})")
    except Exception as e:
        if client is not None:
            client.close()
        _connection_error = str(e)
        log("STORE", f"⚠️ MongoDB not available: {e}")
        log("STORE", "ℹ️ Continuing with the in-memory store")
    return _store


async def disconnect_db() -> None:
    """Close the active store."""
    await _store.close()


def get_store() -> KeyValueStore:
    return _store


def use_store(store: KeyValueStore) -> KeyValueStore:
    """Swap the active store (tests, embedding); returns the previous one."""
    global _store
    previous = _store
    _store = store
    return previous


def get_connection_error() -> Optional[str]:
    """Get connection error message if connection failed."""
    return _connection_error
