"""
Key-value store interface and the in-memory implementation.

Values are JSON-compatible dicts grouped by namespace:
- mastery:       item id -> mastery document
- collocations:  collocation id -> collocation mastery document
- logs:          "calibration" / "errors" -> capped record lists
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol


logger = logging.getLogger(__name__)


MASTERY_NAMESPACE = "mastery"
COLLOCATIONS_NAMESPACE = "collocations"
LOGS_NAMESPACE = "logs"

NAMESPACES = (MASTERY_NAMESPACE, COLLOCATIONS_NAMESPACE, LOGS_NAMESPACE)


class KeyValueStore(Protocol):
    """Durable key-value storage keyed by (namespace, key)."""

    def get(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        ...

    def put(self, namespace: str, key: str, value: dict[str, Any]) -> None:
        ...

    def delete(self, namespace: str, key: str) -> None:
        ...

    def keys(self, namespace: str) -> list[str]:
        ...

    def clear(self, namespace: Optional[str] = None) -> None:
        ...


def encode_value(value: dict[str, Any]) -> str:
    """Serialize a stored value (Arabic text kept readable)."""
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def decode_value(text: str, namespace: str, key: str) -> Optional[dict[str, Any]]:
    """
    Parse a stored value.

    Corrupted JSON, or JSON that is not an object, is logged and read
    as missing.
    """
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        logger.warning("Corrupted JSON at %s/%s, treating as missing", namespace, key)
        return None
    if not isinstance(value, dict):
        logger.warning("Non-object value at %s/%s, treating as missing", namespace, key)
        return None
    return value


class InMemoryStore:
    """
    Process-local store, used in tests and for throwaway sessions.

    Values are held as JSON text so callers never share mutable state
    with the store.
    """

    def __init__(self):
        self._data: dict[tuple[str, str], str] = {}

    def get(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        text = self._data.get((namespace, key))
        if text is None:
            return None
        return decode_value(text, namespace, key)

    def put(self, namespace: str, key: str, value: dict[str, Any]) -> None:
        self._data[(namespace, key)] = encode_value(value)

    def delete(self, namespace: str, key: str) -> None:
        self._data.pop((namespace, key), None)

    def keys(self, namespace: str) -> list[str]:
        return sorted(k for ns, k in self._data if ns == namespace)

    def clear(self, namespace: Optional[str] = None) -> None:
        if namespace is None:
            self._data.clear()
            return
        for entry in [e for e in self._data if e[0] == namespace]:
            del self._data[entry]
