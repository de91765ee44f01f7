"""
Database - SQL-backed key-value store for mastery documents

Uses SQLAlchemy ORM; SQLite by default (DATABASE_URL), any SQLAlchemy
backend otherwise.

This module handles ONLY database I/O.
Algorithm logic lives in the sm2 / difficulty / collocations modules.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from madina.config import get_database_url
from madina.storage.base import decode_value, encode_value
from madina.storage.models import Base, KeyValueEntry


logger = logging.getLogger(__name__)


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create a SQLAlchemy engine.

    SQLite files get their parent directory created; in-memory SQLite
    shares one connection so every session sees the same database.

    Args:
        database_url: Connection string (defaults to DATABASE_URL / the
                      local SQLite file)

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = database_url or get_database_url()
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        database = url.database
        if not database or database == ":memory:":
            return create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False,
            )
        Path(database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            db_url, connect_args={"check_same_thread": False}, echo=False
        )

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


class SqlKeyValueStore:
    """KeyValueStore backed by the mastery_store table."""

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        self.engine = engine or get_engine(database_url)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.init_db()

    def session(self) -> Session:
        return self._session_factory()

    def init_db(self) -> None:
        """
        Create the table if it does not exist.

        Safe to call multiple times.
        """
        if KeyValueEntry.__tablename__ not in inspect(self.engine).get_table_names():
            Base.metadata.create_all(self.engine)
            logger.info("Created table %s", KeyValueEntry.__tablename__)

    def reset_db(self) -> None:
        """
        DANGEROUS: Drop and recreate the table.

        All stored progress will be lost!
        """
        Base.metadata.drop_all(self.engine)
        logger.warning("Dropped table %s", KeyValueEntry.__tablename__)
        self.init_db()

    def get(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        session = self.session()
        try:
            entry = session.query(KeyValueEntry).filter(
                KeyValueEntry.namespace == namespace,
                KeyValueEntry.key == key
            ).first()
            if entry is None:
                return None
            return decode_value(entry.value, namespace, key)
        finally:
            session.close()

    def put(self, namespace: str, key: str, value: dict[str, Any]) -> None:
        """Insert or update one document."""
        session = self.session()
        try:
            entry = session.query(KeyValueEntry).filter(
                KeyValueEntry.namespace == namespace,
                KeyValueEntry.key == key
            ).first()
            now = datetime.now(timezone.utc)

            if entry is None:
                session.add(KeyValueEntry(
                    namespace=namespace,
                    key=key,
                    value=encode_value(value),
                    updated_at=now,
                ))
            else:
                entry.value = encode_value(value)
                entry.updated_at = now

            session.commit()
        finally:
            session.close()

    def delete(self, namespace: str, key: str) -> None:
        session = self.session()
        try:
            session.query(KeyValueEntry).filter(
                KeyValueEntry.namespace == namespace,
                KeyValueEntry.key == key
            ).delete()
            session.commit()
        finally:
            session.close()

    def keys(self, namespace: str) -> list[str]:
        session = self.session()
        try:
            rows = session.query(KeyValueEntry.key).filter(
                KeyValueEntry.namespace == namespace
            ).order_by(KeyValueEntry.key).all()
            return [key for (key,) in rows]
        finally:
            session.close()

    def clear(self, namespace: Optional[str] = None) -> None:
        """Delete every document (optionally only one namespace)."""
        session = self.session()
        try:
            query = session.query(KeyValueEntry)
            if namespace is not None:
                query = query.filter(KeyValueEntry.namespace == namespace)
            deleted = query.delete()
            session.commit()
            logger.info("Cleared %d stored documents", deleted)
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
