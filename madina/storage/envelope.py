"""
Versioned envelope for persisted documents.

Every value written by the engine is stored as
    {"schemaVersion": <int>, "payload": {...}}
so the reader can tell current documents from legacy shapes without
guessing from their fields.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional


logger = logging.getLogger(__name__)

# Bump when a persisted document shape changes incompatibly
SCHEMA_VERSION = 1

VERSION_KEY = "schemaVersion"
PAYLOAD_KEY = "payload"


def wrap(payload: Mapping[str, Any], version: int = SCHEMA_VERSION) -> dict[str, Any]:
    """Wrap a JSON-compatible payload in the current envelope."""
    return {VERSION_KEY: version, PAYLOAD_KEY: dict(payload)}


def is_enveloped(raw: object) -> bool:
    return isinstance(raw, Mapping) and VERSION_KEY in raw and PAYLOAD_KEY in raw


def unwrap(raw: object) -> Optional[dict[str, Any]]:
    """
    Extract the payload from an enveloped value.

    Returns:
        The payload dict, or None (with a warning) when the value is not a
        well-formed envelope or comes from a newer schema version
    """
    if not is_enveloped(raw):
        logger.warning("Stored value is not an envelope, ignoring: %r", raw)
        return None

    version = raw[VERSION_KEY]
    if not isinstance(version, int) or isinstance(version, bool):
        logger.warning("Envelope has a non-integer schema version %r", version)
        return None
    if version > SCHEMA_VERSION:
        logger.warning(
            "Envelope schema version %d is newer than supported version %d",
            version, SCHEMA_VERSION,
        )
        return None

    payload = raw[PAYLOAD_KEY]
    if not isinstance(payload, Mapping):
        logger.warning("Envelope payload is not an object: %r", payload)
        return None
    return dict(payload)
