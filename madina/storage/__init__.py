"""
Storage - durable key-value persistence for mastery state

Quick start:
    from madina.storage import SqlKeyValueStore

    store = SqlKeyValueStore()            # DATABASE_URL or sqlite:///logs/mastery.db
    store.put("mastery", "w1", {...})
"""

from madina.storage.base import (
    COLLOCATIONS_NAMESPACE,
    LOGS_NAMESPACE,
    MASTERY_NAMESPACE,
    NAMESPACES,
    InMemoryStore,
    KeyValueStore,
)
from madina.storage.database import SqlKeyValueStore, get_engine
from madina.storage.envelope import SCHEMA_VERSION, is_enveloped, unwrap, wrap


__all__ = [
    "COLLOCATIONS_NAMESPACE",
    "LOGS_NAMESPACE",
    "MASTERY_NAMESPACE",
    "NAMESPACES",
    "InMemoryStore",
    "KeyValueStore",
    "SqlKeyValueStore",
    "get_engine",
    "SCHEMA_VERSION",
    "is_enveloped",
    "unwrap",
    "wrap",
]
